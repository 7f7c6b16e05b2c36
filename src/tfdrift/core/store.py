"""Resource store capability consumed by the reconciler."""

from __future__ import annotations

from typing import Protocol

from tfdrift.models.resource import Resource, ResourceKey


class ResourceStore(Protocol):
    def get(self, key: ResourceKey) -> Resource | None:
        """Return the current resource, or None if it does not exist.

        Raises StoreUnavailableError on transport failures.
        """
        ...

    def patch_annotations(
        self,
        key: ResourceKey,
        annotations: dict[str, str],
    ) -> Resource | None:
        """Merge ``annotations`` into the resource's annotation set.

        Only the given keys are touched and no object revision is required.
        Raises WriteConflictError if the store reports a conflicting write.
        Returns None if the resource no longer exists.
        """
        ...
