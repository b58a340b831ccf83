from __future__ import annotations

import pytest

from utils.resource_names import (
    RESOURCE_KINDS,
    encode_tag_binding_name,
    ensure_tag_binding_prefix,
    format_bigquery_table_name,
    format_bucket_name,
    format_resource_name,
    format_vm_instance_name,
    normalize_resource_name,
    tag_binding_path,
)

VM = "//compute.googleapis.com/projects/p/zones/z/instances/i"


@pytest.mark.parametrize(
    ("kind", "parts", "expected"),
    [
        ("vm-instance", ("p1", "z1", "i1"), "//compute.googleapis.com/projects/p1/zones/z1/instances/i1"),
        ("disk", ("p1", "z1", "d1"), "//compute.googleapis.com/projects/p1/zones/z1/disks/d1"),
        ("project", ("p1",), "//cloudresourcemanager.googleapis.com/projects/p1"),
        ("bucket", ("b1",), "//storage.googleapis.com/projects/_/buckets/b1"),
        ("bigquery-dataset", ("p1", "ds"), "//bigquery.googleapis.com/projects/p1/datasets/ds"),
        (
            "bigquery-table",
            ("p1", "ds", "t"),
            "//bigquery.googleapis.com/projects/p1/datasets/ds/tables/t",
        ),
        ("cloudsql-instance", ("p1", "db"), "//sqladmin.googleapis.com/projects/p1/instances/db"),
        (
            "gke-cluster",
            ("p1", "us-central1", "c1"),
            "//container.googleapis.com/projects/p1/locations/us-central1/clusters/c1",
        ),
    ],
)
def test_format_resource_name_templates(kind: str, parts: tuple[str, ...], expected: str) -> None:
    assert format_resource_name(kind, *parts) == expected


def test_every_kind_is_covered_by_a_template() -> None:
    assert set(RESOURCE_KINDS) == {
        "vm-instance",
        "disk",
        "project",
        "bucket",
        "bigquery-dataset",
        "bigquery-table",
        "cloudsql-instance",
        "gke-cluster",
    }


def test_wrappers_match_generic_formatter() -> None:
    assert format_vm_instance_name("p", "z", "i") == VM
    assert format_bucket_name("b") == format_resource_name("bucket", "b")
    assert format_bigquery_table_name("p", "d", "t").endswith("/datasets/d/tables/t")


def test_format_resource_name_does_not_validate_part_contents() -> None:
    assert format_resource_name("project", "a/b c") == "//cloudresourcemanager.googleapis.com/projects/a/b c"


def test_format_resource_name_rejects_unknown_kind_and_arity() -> None:
    with pytest.raises(ValueError, match="Unknown resource kind"):
        format_resource_name("queue", "x")
    with pytest.raises(ValueError, match="takes 3 part"):
        format_resource_name("vm-instance", "p", "z")


def test_encode_tag_binding_name_uses_at_signs() -> None:
    assert (
        encode_tag_binding_name(VM, "tagValues/123")
        == "tagBindings/compute.googleapis.com@projects@p@zones@z@instances@i@tagValues@123"
    )


def test_encode_tag_binding_name_is_pure() -> None:
    first = encode_tag_binding_name(VM, "tagValues/123")
    assert encode_tag_binding_name(VM, "tagValues/123") == first
    assert format_vm_instance_name("p", "z", "i") == format_vm_instance_name("p", "z", "i")


def test_tag_binding_path_percent_encodes_resource_only() -> None:
    assert tag_binding_path(VM, "tagValues/123") == (
        "tagBindings/%2F%2Fcompute.googleapis.com%2Fprojects%2Fp%2Fzones%2Fz%2Finstances%2Fi"
        "/tagValues/123"
    )


def test_rest_path_and_display_name_differ() -> None:
    assert tag_binding_path(VM, "tagValues/1") != encode_tag_binding_name(VM, "tagValues/1")


def test_normalize_resource_name_drops_compute_v1_and_is_idempotent() -> None:
    raw = "//compute.googleapis.com/compute/v1/projects/p/zones/z/instances/i"
    once = normalize_resource_name(raw)
    assert once == VM
    assert normalize_resource_name(once) == once
    assert normalize_resource_name(VM) == VM


def test_ensure_tag_binding_prefix() -> None:
    assert ensure_tag_binding_prefix("abc") == "tagBindings/abc"
    assert ensure_tag_binding_prefix("tagBindings/abc") == "tagBindings/abc"
