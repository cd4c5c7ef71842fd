"""
Factories for litepersist components.

DefaultSqliteFactory registers SqliteConnection under
pip-services:connection:sqlite:*:1.0 so containers can create it by
descriptor.
"""

from litepersist.build.factory import DefaultSqliteFactory, Factory

__all__ = [
    "DefaultSqliteFactory",
    "Factory",
]
