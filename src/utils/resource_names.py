"""Canonical resource names and tag-binding name encodings.

Two binding encodings exist and are not interchangeable:

- the display/reference form, `tagBindings/<resource with '@'>@<tagValue with '@'>`,
  as shown by the console and accepted by `delete`;
- the REST addressing form, `tagBindings/<resource with '%2F'>/<tagValue>`,
  used to address a binding by (resource, tag value) in a URL.
"""

from __future__ import annotations

TAG_BINDINGS_PREFIX = "tagBindings/"
_COMPUTE_V1_SEGMENT = "/compute/v1"

_RESOURCE_TEMPLATES: dict[str, str] = {
    "vm-instance": "//compute.googleapis.com/projects/{}/zones/{}/instances/{}",
    "disk": "//compute.googleapis.com/projects/{}/zones/{}/disks/{}",
    "project": "//cloudresourcemanager.googleapis.com/projects/{}",
    "bucket": "//storage.googleapis.com/projects/_/buckets/{}",
    "bigquery-dataset": "//bigquery.googleapis.com/projects/{}/datasets/{}",
    "bigquery-table": "//bigquery.googleapis.com/projects/{}/datasets/{}/tables/{}",
    "cloudsql-instance": "//sqladmin.googleapis.com/projects/{}/instances/{}",
    "gke-cluster": "//container.googleapis.com/projects/{}/locations/{}/clusters/{}",
}

RESOURCE_KINDS = tuple(sorted(_RESOURCE_TEMPLATES))


def format_resource_name(kind: str, *parts: str) -> str:
    """Return the canonical `//<service>/...` name for a resource kind.

    Part contents are interpolated as-is; only the kind and the number of
    parts are checked.

    Raises:
        ValueError: Unknown kind or wrong number of parts.
    """
    template = _RESOURCE_TEMPLATES.get(kind)
    if template is None:
        raise ValueError(
            f"Unknown resource kind '{kind}'. Known kinds: {', '.join(RESOURCE_KINDS)}",
        )
    expected = template.count("{}")
    if len(parts) != expected:
        raise ValueError(f"Resource kind '{kind}' takes {expected} part(s), got {len(parts)}.")
    return template.format(*parts)


def format_vm_instance_name(project_id: str, zone: str, instance_name: str) -> str:
    return format_resource_name("vm-instance", project_id, zone, instance_name)


def format_disk_name(project_id: str, zone: str, disk_name: str) -> str:
    return format_resource_name("disk", project_id, zone, disk_name)


def format_project_name(project_id: str) -> str:
    return format_resource_name("project", project_id)


def format_bucket_name(bucket_name: str) -> str:
    return format_resource_name("bucket", bucket_name)


def format_bigquery_dataset_name(project_id: str, dataset: str) -> str:
    return format_resource_name("bigquery-dataset", project_id, dataset)


def format_bigquery_table_name(project_id: str, dataset: str, table: str) -> str:
    return format_resource_name("bigquery-table", project_id, dataset, table)


def format_cloudsql_instance_name(project_id: str, instance_name: str) -> str:
    return format_resource_name("cloudsql-instance", project_id, instance_name)


def format_gke_cluster_name(project_id: str, location: str, cluster_name: str) -> str:
    return format_resource_name("gke-cluster", project_id, location, cluster_name)


def encode_tag_binding_name(resource_name: str, tag_value_name: str) -> str:
    """Build the display form of a binding name from (resource, tag value)."""
    resource_part = resource_name[2:] if resource_name.startswith("//") else resource_name
    resource_part = resource_part.replace("/", "@")
    tag_value_part = tag_value_name.replace("/", "@")
    return f"{TAG_BINDINGS_PREFIX}{resource_part}@{tag_value_part}"


def tag_binding_path(resource_name: str, tag_value_name: str) -> str:
    """Build the REST path addressing a binding by (resource, tag value)."""
    return f"{TAG_BINDINGS_PREFIX}{resource_name.replace('/', '%2F')}/{tag_value_name}"


def normalize_resource_name(resource_name: str) -> str:
    """Drop any `/compute/v1` segment some callers embed in compute names."""
    return resource_name.replace(_COMPUTE_V1_SEGMENT, "")


def ensure_tag_binding_prefix(name: str) -> str:
    if name.startswith(TAG_BINDINGS_PREFIX):
        return name
    return TAG_BINDINGS_PREFIX + name
