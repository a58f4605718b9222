# ============================================================================
# JOB DEFINITION MODEL
# ============================================================================
# STATUS: Core model - Immutable batch/v1 Job definition
# PURPOSE: Strategy-specific job structure, validated before submission
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: JobDefinition, ContainerSpec, VolumeSpec, VolumeMount, ResourceRequirements
# DEPENDENCIES: pydantic
# ============================================================================
"""
Job Definition Model

A JobDefinition is built once per run, submitted once and never updated.
Garbage collection is delegated to the cluster via ttl_seconds_after_finished.

Structural rules enforced at construction:
- At least one container, container names unique
- Volume names unique, every mount references a declared volume
- Each volume has exactly one source (emptyDir or ConfigMap)
- Sidecar definitions carry exactly two containers (main first)
  and share the process namespace
- The job name is a valid RFC 1123 label

Label and resource maps are FrozenMap instances and reject mutation.

Container command/args are opaque shell and are never inspected.
"""

import re
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import AfterValidator, BaseModel, Field, model_validator

from core.contracts import MetricsStrategy, RestartPolicy

# RFC 1123 label: lowercase alphanumerics and '-', alphanumeric at both ends
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
MAX_NAME_LENGTH = 63


class FrozenMap(dict):
    """A dict that rejects mutation after construction."""

    def _read_only(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __reduce__(self):
        return (type(self), (dict(self),))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


def _freeze(value: Dict[str, str]) -> FrozenMap:
    return FrozenMap(value)


StringMap = Annotated[Dict[str, str], AfterValidator(_freeze)]


# ============================================================================
# CONTAINER PARTS
# ============================================================================

class ResourceRequirements(BaseModel):
    """CPU / memory requests and limits as Kubernetes quantity strings."""
    requests: StringMap = Field(default_factory=FrozenMap)
    limits: StringMap = Field(default_factory=FrozenMap)

    model_config = {"frozen": True}

    def to_manifest(self) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {}
        if self.requests:
            manifest["requests"] = dict(self.requests)
        if self.limits:
            manifest["limits"] = dict(self.limits)
        return manifest


class VolumeMount(BaseModel):
    """Mount of a named volume into a container."""
    name: str = Field(..., min_length=1, max_length=63)
    mount_path: str = Field(..., min_length=1)
    sub_path: Optional[str] = None

    model_config = {"frozen": True}

    def to_manifest(self) -> Dict[str, Any]:
        manifest = {"name": self.name, "mountPath": self.mount_path}
        if self.sub_path:
            manifest["subPath"] = self.sub_path
        return manifest


class ContainerSpec(BaseModel):
    """One container of the pod template."""
    name: str = Field(..., min_length=1, max_length=63)
    image: str = Field(..., min_length=1)
    command: Tuple[str, ...] = Field(default_factory=tuple)
    args: Tuple[str, ...] = Field(default_factory=tuple)
    resources: Optional[ResourceRequirements] = None
    volume_mounts: Tuple[VolumeMount, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    def to_manifest(self) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {"name": self.name, "image": self.image}
        if self.command:
            manifest["command"] = list(self.command)
        if self.args:
            manifest["args"] = list(self.args)
        if self.resources is not None:
            manifest["resources"] = self.resources.to_manifest()
        if self.volume_mounts:
            manifest["volumeMounts"] = [m.to_manifest() for m in self.volume_mounts]
        return manifest


# ============================================================================
# VOLUMES
# ============================================================================

class EmptyDirSource(BaseModel):
    """Ephemeral volume that lives as long as the pod."""
    medium: Optional[str] = None

    model_config = {"frozen": True}


class ConfigMapSource(BaseModel):
    """Volume populated from a ConfigMap."""
    name: str = Field(..., min_length=1)
    default_mode: Optional[int] = Field(default=None, ge=0, le=0o777)

    model_config = {"frozen": True}


class VolumeSpec(BaseModel):
    """A pod volume. Exactly one source must be set."""
    name: str = Field(..., min_length=1, max_length=63)
    empty_dir: Optional[EmptyDirSource] = None
    config_map: Optional[ConfigMapSource] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "VolumeSpec":
        sources = [s for s in (self.empty_dir, self.config_map) if s is not None]
        if len(sources) != 1:
            raise ValueError(
                f"Volume '{self.name}' must declare exactly one source, got {len(sources)}"
            )
        return self

    def to_manifest(self) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {"name": self.name}
        if self.empty_dir is not None:
            empty_dir: Dict[str, Any] = {}
            if self.empty_dir.medium:
                empty_dir["medium"] = self.empty_dir.medium
            manifest["emptyDir"] = empty_dir
        if self.config_map is not None:
            config_map: Dict[str, Any] = {"name": self.config_map.name}
            if self.config_map.default_mode is not None:
                config_map["defaultMode"] = self.config_map.default_mode
            manifest["configMap"] = config_map
        return manifest


# ============================================================================
# JOB DEFINITION
# ============================================================================

class JobDefinition(BaseModel):
    """
    Immutable batch/v1 Job definition for one run.

    Built by services.definition_builder from the strategy policy table.
    backoff_limit and ttl_seconds_after_finished are fixed per strategy.
    """

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    namespace: str = Field(default="default", min_length=1, max_length=63)
    strategy: MetricsStrategy

    # Metadata
    labels: StringMap = Field(default_factory=FrozenMap)
    pod_labels: StringMap = Field(default_factory=FrozenMap)

    # Pod template
    containers: Tuple[ContainerSpec, ...]
    volumes: Tuple[VolumeSpec, ...] = Field(default_factory=tuple)
    restart_policy: RestartPolicy = RestartPolicy.NEVER
    share_process_namespace: bool = False

    # Job spec
    backoff_limit: int = Field(default=0, ge=0)
    ttl_seconds_after_finished: int = Field(default=300, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_structure(self) -> "JobDefinition":
        errors = self.structural_errors()
        if errors:
            raise ValueError("; ".join(errors))
        return self

    def structural_errors(self) -> List[str]:
        """
        Collect every structural problem at once.

        Returns an empty list for a well-formed definition.
        """
        errors: List[str] = []

        if not _DNS_LABEL.match(self.name):
            errors.append(f"Job name '{self.name}' is not a valid RFC 1123 label")

        if not self.containers:
            errors.append("Job must declare at least one container")

        container_names = [c.name for c in self.containers]
        if len(set(container_names)) != len(container_names):
            errors.append(f"Duplicate container names: {container_names}")

        volume_names = [v.name for v in self.volumes]
        if len(set(volume_names)) != len(volume_names):
            errors.append(f"Duplicate volume names: {volume_names}")

        declared = set(volume_names)
        for container in self.containers:
            for mount in container.volume_mounts:
                if mount.name not in declared:
                    errors.append(
                        f"Container '{container.name}' mounts undeclared volume '{mount.name}'"
                    )

        for required in ("app", "metrics-type"):
            if required not in self.labels:
                errors.append(f"Missing required label: {required}")

        if self.strategy is MetricsStrategy.SIDECAR:
            if len(self.containers) != 2:
                errors.append(
                    f"Sidecar job needs exactly 2 containers (main, sidecar), "
                    f"got {len(self.containers)}"
                )
            if not self.share_process_namespace:
                errors.append("Sidecar job must share the process namespace")
        elif self.share_process_namespace:
            errors.append(f"Only sidecar jobs share the process namespace, not {self.strategy.value}")

        return errors

    @property
    def main_container(self) -> ContainerSpec:
        """The workload container (always first)."""
        return self.containers[0]

    @property
    def mounted_volume_names(self) -> List[str]:
        return sorted({m.name for c in self.containers for m in c.volume_mounts})

    def to_manifest(self) -> Dict[str, Any]:
        """Render the batch/v1 Job body accepted by the Kubernetes API."""
        pod_spec: Dict[str, Any] = {
            "containers": [c.to_manifest() for c in self.containers],
            "restartPolicy": self.restart_policy.value,
        }
        if self.volumes:
            pod_spec["volumes"] = [v.to_manifest() for v in self.volumes]
        if self.share_process_namespace:
            pod_spec["shareProcessNamespace"] = True

        return {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
            },
            "spec": {
                "backoffLimit": self.backoff_limit,
                "ttlSecondsAfterFinished": self.ttl_seconds_after_finished,
                "template": {
                    "metadata": {"labels": dict(self.pod_labels)},
                    "spec": pod_spec,
                },
            },
        }


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ResourceRequirements",
    "VolumeMount",
    "ContainerSpec",
    "EmptyDirSource",
    "ConfigMapSource",
    "VolumeSpec",
    "JobDefinition",
    "FrozenMap",
    "MAX_NAME_LENGTH",
]
