"""
Demo settings

Lifecycle, provisioning and email options resolved once from
ApplicationConfig and handed to the services that need them.
"""

from pydantic import BaseModel, Field


class DemoSettings(BaseModel):
    max_concurrent_tenants: int = Field(default=20, ge=1)
    demo_duration_hours: int = Field(default=24, ge=1)
    max_demo_hours: int = Field(default=72, ge=1)
    port_range_start: int = Field(default=4000, ge=1, le=65535)
    port_range_size: int = Field(default=1000, ge=1)

    api_prefix: str = "/api"
    site_url: str = "http://localhost:8000"
    base_domain: str = "demo.localhost"

    base_path: str = "/var/demos"
    template_path: str = "/var/demos/template"
    use_docker: bool = False
    docker_image: str = "cms:demo"
    docker_network: str = "cms-demos"
    container_memory: str = "512m"
    container_cpus: str = "1"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    command_timeout: float = 120.0

    email_from: str = "CMS Demo <noreply@demo.localhost>"
    sales_email: str = ""

    @classmethod
    def from_config(cls, config) -> "DemoSettings":
        return cls(
            max_concurrent_tenants=config.MAX_CONCURRENT_TENANTS,
            demo_duration_hours=config.DEMO_DURATION_HOURS,
            max_demo_hours=config.MAX_DEMO_HOURS,
            port_range_start=config.PORT_RANGE_START,
            port_range_size=config.PORT_RANGE_SIZE,
            api_prefix=config.API_PREFIX,
            site_url=config.SITE_URL,
            base_domain=config.DEMO_BASE_DOMAIN,
            base_path=config.DEMO_BASE_PATH,
            template_path=config.DEMO_TEMPLATE_PATH,
            use_docker=config.DEMO_USE_DOCKER,
            docker_image=config.DEMO_DOCKER_IMAGE,
            docker_network=config.DEMO_DOCKER_NETWORK,
            container_memory=config.DEMO_CONTAINER_MEMORY,
            container_cpus=config.DEMO_CONTAINER_CPUS,
            postgres_host=config.POSTGRES_HOST,
            postgres_port=config.POSTGRES_PORT,
            postgres_user=config.POSTGRES_USER,
            postgres_password=config.POSTGRES_PASSWORD,
            command_timeout=config.PROVISION_COMMAND_TIMEOUT,
            email_from=config.EMAIL_FROM,
            sales_email=config.SALES_EMAIL,
        )

    @property
    def effective_duration_hours(self) -> int:
        return min(self.demo_duration_hours, self.max_demo_hours)

    @property
    def port_range(self) -> range:
        return range(self.port_range_start, self.port_range_start + self.port_range_size)

    def access_url(self, subdomain: str) -> str:
        return f"https://{subdomain}.{self.base_domain}"

    def verification_url(self, token: str) -> str:
        return f"{self.site_url.rstrip('/')}{self.api_prefix}/demos/verify/{token}"

    def upgrade_url(self, subdomain: str) -> str:
        return f"{self.site_url.rstrip('/')}/demo/upgrade?ref={subdomain}"

    def unsubscribe_url(self, token: str) -> str:
        return f"{self.site_url.rstrip('/')}{self.api_prefix}/demos/unsubscribe/{token}"
