# teamcal/core/permissions/__init__.py

"""
Permission model: per-user, per-module access levels on two axes.

``my``  - записи, созданные самим пользователем;
``all`` - записи, созданные другими.
"""

from .models import Module, PermissionLevel  # noqa: F401
from .service import PermissionsService  # noqa: F401

__all__: list[str] = ["Module", "PermissionLevel", "PermissionsService"]
