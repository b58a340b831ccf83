"""Global vs. regional Cloud Resource Manager endpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_GLOBAL_HOST = "cloudresourcemanager.googleapis.com"
DEFAULT_API_VERSION = "v3"

_ZONE_PATTERN = re.compile(r".*-[a-z]$")


@dataclass(frozen=True)
class ResourceLocation:
    """Where requests for one call go."""

    base_url: str
    is_regional: bool
    region: str | None = None


def is_zone(location: str) -> bool:
    return bool(_ZONE_PATTERN.match(location))


def region_from_zone(location: str) -> str:
    """Return `us-central1` for `us-central1-a`; other strings are returned unchanged."""
    if not is_zone(location):
        return location
    return location.rsplit("-", 1)[0]


class EndpointResolver:
    """Pick the API base URL for an optional location.

    `derive_region_from_zone` selects between the two behaviors seen in the
    field: reduce a zone to its region before building the regional host, or
    use the location verbatim as the host prefix.
    """

    def __init__(
        self,
        *,
        global_host: str = DEFAULT_GLOBAL_HOST,
        api_version: str = DEFAULT_API_VERSION,
        derive_region_from_zone: bool = True,
    ):
        self.global_host = global_host
        self.api_version = api_version
        self.derive_region_from_zone = derive_region_from_zone

    @property
    def global_base_url(self) -> str:
        return f"https://{self.global_host}/{self.api_version}"

    @property
    def regional_host_marker(self) -> str:
        return f"-{self.global_host}"

    def resolve(self, location: str | None) -> ResourceLocation:
        location = (location or "").strip()
        if not location:
            return ResourceLocation(base_url=self.global_base_url, is_regional=False)

        region = region_from_zone(location) if self.derive_region_from_zone else location
        return ResourceLocation(
            base_url=f"https://{region}-{self.global_host}/{self.api_version}",
            is_regional=True,
            region=region,
        )

    def operation_url(self, operation_name: str) -> str:
        """Return the URL to GET for an operation name.

        Regional operation names already carry their host and are used as-is.
        Everything else is relative to the global endpoint.
        """
        if self.regional_host_marker in operation_name or operation_name.startswith("https://"):
            return operation_name
        return f"{self.global_base_url}/{operation_name.lstrip('/')}"
