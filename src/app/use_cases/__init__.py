"""
Use Cases

Organized by area:
- demos/: Demo request and email verification
- lifecycle/: Tenant creation, extension, termination and demo access
- sweeps/: Scheduled expiration, warning and cleanup jobs
- content/: Tenant-scoped CMS reads

Import from the subpackages.
"""
