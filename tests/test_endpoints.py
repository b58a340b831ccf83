from __future__ import annotations

import pytest

from utils.endpoints import EndpointResolver, is_zone, region_from_zone

GLOBAL = "https://cloudresourcemanager.googleapis.com/v3"


def test_zone_is_reduced_to_region() -> None:
    location = EndpointResolver().resolve("us-central1-a")
    assert location.is_regional is True
    assert location.region == "us-central1"
    assert location.base_url == "https://us-central1-cloudresourcemanager.googleapis.com/v3"


def test_region_is_used_verbatim() -> None:
    location = EndpointResolver().resolve("us-central1")
    assert location.region == "us-central1"
    assert location.base_url == "https://us-central1-cloudresourcemanager.googleapis.com/v3"


@pytest.mark.parametrize("location", [None, "", "   "])
def test_missing_location_uses_global_host(location) -> None:
    resolved = EndpointResolver().resolve(location)
    assert resolved.base_url == GLOBAL
    assert resolved.is_regional is False
    assert resolved.region is None


def test_zone_used_verbatim_when_derivation_disabled() -> None:
    resolved = EndpointResolver(derive_region_from_zone=False).resolve("europe-west1-b")
    assert resolved.base_url == "https://europe-west1-b-cloudresourcemanager.googleapis.com/v3"


def test_zone_helpers() -> None:
    assert is_zone("us-east1-c")
    assert not is_zone("us-east1")
    assert region_from_zone("us-east1-c") == "us-east1"
    assert region_from_zone("us-east1") == "us-east1"


def test_operation_url_relative_name_uses_global_base() -> None:
    assert EndpointResolver().operation_url("operations/rctb.abc") == f"{GLOBAL}/operations/rctb.abc"


def test_operation_url_regional_name_is_used_as_is() -> None:
    name = "https://us-central1-cloudresourcemanager.googleapis.com/v3/operations/rctb.abc"
    assert EndpointResolver().operation_url(name) == name


def test_custom_host_and_version() -> None:
    resolver = EndpointResolver(global_host="crm.example.test", api_version="v9")
    assert resolver.resolve(None).base_url == "https://crm.example.test/v9"
    assert resolver.resolve("asia-east1-a").base_url == "https://asia-east1-crm.example.test/v9"
