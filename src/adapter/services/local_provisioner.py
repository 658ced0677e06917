"""
Local infrastructure adapters

Postgres databases through psql, per-tenant config directories on disk and
the runtime unit as either a Docker container or a pm2 process. Identifiers
arrive validated in ProvisioningSpec and are passed as separate arguments.
"""

import asyncio
import json
import logging
import secrets
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from src.adapter.services.command_runner import CommandError, CommandRunner
from src.app.services.demo_settings import DemoSettings
from src.app.services.provisioner import IInfrastructureProvisioner, ProvisioningSpec
from src.domain.identifiers import resolve_within

logger = logging.getLogger(__name__)

CONTAINER_PORT = 3000
MISSING_RESOURCE_MARKERS = ("no such container", "not found", "doesn't exist", "does not exist")


def _is_missing_resource(exc: CommandError) -> bool:
    output = f"{exc.result.stderr}\n{exc.result.stdout}".lower()
    return any(marker in output for marker in MISSING_RESOURCE_MARKERS)


class PostgresDatabaseManager:
    def __init__(self, runner: CommandRunner, settings: DemoSettings):
        self.runner = runner
        self.settings = settings

    def _env(self):
        return {"PGPASSWORD": self.settings.postgres_password}

    def _psql(self, sql: str):
        return [
            "psql",
            "-h", self.settings.postgres_host,
            "-p", str(self.settings.postgres_port),
            "-U", self.settings.postgres_user,
            "-v", "ON_ERROR_STOP=1",
            "-c", sql,
        ]

    def database_url(self, database_name: str) -> str:
        s = self.settings
        return (
            f"postgresql://{s.postgres_user}:{s.postgres_password}"
            f"@{s.postgres_host}:{s.postgres_port}/{database_name}"
        )

    async def create(self, spec: ProvisioningSpec) -> None:
        await self.runner.run(self._psql(f'CREATE DATABASE "{spec.database_name}";'), env=self._env())

        template = Path(self.settings.template_path)
        if template.is_dir():
            await self.runner.run(
                ["npx", "prisma", "db", "push", "--skip-generate"],
                env={**self._env(), "DATABASE_URL": self.database_url(spec.database_name)},
                cwd=str(template),
            )
        else:
            logger.warning(f"Template {template} not found, skipping schema push")
        logger.info(f"Database created: {spec.database_name}")

    async def drop(self, spec: ProvisioningSpec) -> None:
        await self.runner.run(
            self._psql(f'DROP DATABASE IF EXISTS "{spec.database_name}";'), env=self._env()
        )
        logger.info(f"Database dropped: {spec.database_name}")


def render_env_file(spec: ProvisioningSpec, settings: DemoSettings, database_url: str) -> str:
    host = f"{spec.subdomain}.{settings.base_domain}"
    return f"""# Demo Instance: {spec.subdomain}
NODE_ENV=production
PORT={spec.port}

# Database
DATABASE_URL="{database_url}"

# Demo Mode - Restricts certain features
DEMO_MODE=true
DEMO_SUBDOMAIN={spec.subdomain}
DEMO_TENANT_ID={spec.tenant_id}

# Disable real emails in demo
SMTP_HOST=
SMTP_USER=
SMTP_PASSWORD=

# Disable external API calls
OPENAI_API_KEY=demo-disabled
ANTHROPIC_API_KEY=demo-disabled
STRIPE_SECRET_KEY=demo-disabled

# Security
JWT_SECRET={secrets.token_hex(32)}
SESSION_SECRET={secrets.token_hex(32)}

# URLs
FRONTEND_URL=https://{host}
ADMIN_URL=https://{host}/admin
"""


def render_nginx_config(spec: ProvisioningSpec, settings: DemoSettings) -> str:
    host = f"{spec.subdomain}.{settings.base_domain}"
    return f"""server {{
    listen 80;
    server_name {host};
    return 301 https://$server_name$request_uri;
}}

server {{
    listen 443 ssl http2;
    server_name {host};

    ssl_certificate /etc/letsencrypt/live/{settings.base_domain}/fullchain.pem;
    ssl_certificate_key /etc/letsencrypt/live/{settings.base_domain}/privkey.pem;

    location / {{
        proxy_pass http://127.0.0.1:{spec.port};
        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection 'upgrade';
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
        proxy_cache_bypass $http_upgrade;
    }}
}}
"""


class TenantConfigWriter:
    def __init__(self, settings: DemoSettings, database: PostgresDatabaseManager):
        self.settings = settings
        self.database = database

    def tenant_dir(self, spec: ProvisioningSpec) -> Path:
        return resolve_within(Path(self.settings.base_path), spec.subdomain)

    def _write(self, spec: ProvisioningSpec) -> Path:
        demo_path = self.tenant_dir(spec)
        demo_path.mkdir(parents=True, exist_ok=True)
        (demo_path / "uploads").mkdir(exist_ok=True)
        (demo_path / "themes").mkdir(exist_ok=True)

        env_file = demo_path / ".env"
        env_file.write_text(
            render_env_file(spec, self.settings, self.database.database_url(spec.database_name))
        )
        env_file.chmod(0o600)
        (demo_path / "nginx.conf").write_text(render_nginx_config(spec, self.settings))
        return demo_path

    def _remove(self, spec: ProvisioningSpec) -> None:
        demo_path = self.tenant_dir(spec)
        if demo_path == Path(self.settings.base_path).resolve():
            raise ValueError("refusing to remove the demo base directory")
        if demo_path.exists():
            shutil.rmtree(demo_path)

    async def write(self, spec: ProvisioningSpec) -> None:
        demo_path = await asyncio.to_thread(self._write, spec)
        logger.info(f"Demo directory created: {demo_path}")

    async def remove(self, spec: ProvisioningSpec) -> None:
        await asyncio.to_thread(self._remove, spec)
        logger.info(f"Demo directory removed for {spec.subdomain}")


class RuntimeManager(ABC):
    @abstractmethod
    async def start(self, spec: ProvisioningSpec) -> None:
        pass

    @abstractmethod
    async def stop(self, spec: ProvisioningSpec) -> None:
        pass


class DockerRuntime(RuntimeManager):
    def __init__(self, runner: CommandRunner, settings: DemoSettings, config: TenantConfigWriter):
        self.runner = runner
        self.settings = settings
        self.config = config

    @staticmethod
    def container_name(spec: ProvisioningSpec) -> str:
        return f"nodepress-demo-{spec.subdomain}"

    def run_args(self, spec: ProvisioningSpec) -> list:
        s = self.settings
        demo_path = self.config.tenant_dir(spec)
        router = f"traefik.http.routers.{spec.subdomain}"
        return [
            "docker", "run", "-d",
            "--name", self.container_name(spec),
            "--network", s.docker_network,
            "--memory", s.container_memory,
            "--cpus", s.container_cpus,
            "-p", f"{spec.port}:{CONTAINER_PORT}",
            "-v", f"{demo_path / 'uploads'}:/app/uploads",
            "-v", f"{demo_path / 'themes'}:/app/themes",
            "--env-file", str(demo_path / ".env"),
            "--label", "traefik.enable=true",
            "--label", f"{router}.rule=Host(`{spec.subdomain}.{s.base_domain}`)",
            "--label", f"{router}.tls=true",
            "--label", f"{router}.tls.certresolver=letsencrypt",
            "--label", f"demo.tenant_id={spec.tenant_id}",
            "--restart", "unless-stopped",
            s.docker_image,
        ]

    async def start(self, spec: ProvisioningSpec) -> None:
        result = await self.runner.run(self.run_args(spec))
        logger.info(f"Docker container started: {result.stdout.strip()[:12]}")

    async def stop(self, spec: ProvisioningSpec) -> None:
        name = self.container_name(spec)
        for argv in (["docker", "stop", name], ["docker", "rm", name]):
            try:
                await self.runner.run(argv)
            except CommandError as exc:
                if not _is_missing_resource(exc):
                    raise
        logger.info(f"Docker container stopped: {name}")


class Pm2Runtime(RuntimeManager):
    def __init__(self, runner: CommandRunner, settings: DemoSettings, config: TenantConfigWriter):
        self.runner = runner
        self.settings = settings
        self.config = config

    @staticmethod
    def process_name(spec: ProvisioningSpec) -> str:
        return f"demo-{spec.subdomain}"

    def ecosystem(self, spec: ProvisioningSpec) -> dict:
        demo_path = self.config.tenant_dir(spec)
        return {
            "apps": [
                {
                    "name": self.process_name(spec),
                    "script": "dist/main.js",
                    "cwd": self.settings.template_path,
                    "env": {"NODE_ENV": "production", "PORT": str(spec.port)},
                    "env_file": str(demo_path / ".env"),
                    "instances": 1,
                    "max_memory_restart": "256M",
                }
            ]
        }

    def _write_ecosystem(self, spec: ProvisioningSpec) -> Path:
        path = self.config.tenant_dir(spec) / "ecosystem.config.json"
        path.write_text(json.dumps(self.ecosystem(spec), indent=2))
        return path

    async def start(self, spec: ProvisioningSpec) -> None:
        path = await asyncio.to_thread(self._write_ecosystem, spec)
        await self.runner.run(["pm2", "start", str(path)])
        logger.info(f"PM2 process started: {self.process_name(spec)}")

    async def stop(self, spec: ProvisioningSpec) -> None:
        try:
            await self.runner.run(["pm2", "delete", self.process_name(spec)])
        except CommandError as exc:
            if not _is_missing_resource(exc):
                raise
        logger.info(f"PM2 process stopped: {self.process_name(spec)}")


class LocalInfrastructureProvisioner(IInfrastructureProvisioner):
    def __init__(
        self,
        database: PostgresDatabaseManager,
        config: TenantConfigWriter,
        runtime: RuntimeManager,
    ):
        self.database = database
        self.config = config
        self.runtime = runtime

    @classmethod
    def from_settings(cls, settings: DemoSettings) -> "LocalInfrastructureProvisioner":
        runner = CommandRunner(timeout=settings.command_timeout)
        database = PostgresDatabaseManager(runner, settings)
        config = TenantConfigWriter(settings, database)
        runtime_cls = DockerRuntime if settings.use_docker else Pm2Runtime
        return cls(database, config, runtime_cls(runner, settings, config))

    async def create_database(self, spec: ProvisioningSpec) -> None:
        await self.database.create(spec)

    async def drop_database(self, spec: ProvisioningSpec) -> None:
        await self.database.drop(spec)

    async def write_config(self, spec: ProvisioningSpec) -> None:
        await self.config.write(spec)

    async def remove_config(self, spec: ProvisioningSpec) -> None:
        await self.config.remove(spec)

    async def start_runtime(self, spec: ProvisioningSpec) -> None:
        await self.runtime.start(spec)

    async def stop_runtime(self, spec: ProvisioningSpec) -> None:
        await self.runtime.stop(spec)
