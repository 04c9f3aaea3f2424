"""
Profile management.

A profile is an ordered list of server references, each naming a server
template plus per-instance environment overrides. Template references
are not checked when written; they are resolved when a profile is applied.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

from mcpjson.core.exceptions import (
    AlreadyExistsError, DuplicateInstanceNameError, NotFoundError, ValidationError,
)
from mcpjson.core.mcp_config import load_mcp_config
from mcpjson.core.models import Profile, ServerOverrides, ServerRef
from mcpjson.core.storage import JsonRecordStore, RecordFailure
from mcpjson.core.templates import fresh_timestamp_after
from mcpjson.utils.logging import get_logger
from mcpjson.utils.validators import validate_name

if TYPE_CHECKING:
    from mcpjson.core.templates import TemplateStore

logger = get_logger(__name__)

RESOURCE_TYPE = "profile"


class ProfileStore(JsonRecordStore[Profile]):
    """Manages profiles stored as ``<profiles_dir>/<name>.json``."""

    resource_type = RESOURCE_TYPE
    model = Profile

    def create(self, name: str, description: str = "") -> Profile:
        """
        Create an empty profile. Never overwrites.

        Raises:
            AlreadyExistsError: If the profile exists
        """
        validate_name(name, RESOURCE_TYPE)
        if self.exists(name):
            raise AlreadyExistsError(RESOURCE_TYPE, name, force_hint=False)

        profile = Profile(name=name, description=description)
        self._save(profile)
        logger.info(f"Created profile '{name}'")
        return profile

    def list_profiles(self) -> Tuple[List[Profile], List[RecordFailure]]:
        """List profiles; see ``JsonRecordStore.list_records``."""
        return self.list_records()

    def delete(self, name: str, force: bool = False) -> bool:
        """
        Delete a profile.

        Returns:
            False if the user declined the confirmation

        Raises:
            NotFoundError: If the profile does not exist
        """
        if not self.exists(name):
            raise NotFoundError(RESOURCE_TYPE, name)

        if not force and not self.confirmer.confirm(f"Delete profile '{name}'?"):
            logger.info(f"Deletion of profile '{name}' cancelled")
            return False

        self._remove(name)
        logger.info(f"Deleted profile '{name}'")
        return True

    def rename(self, old: str, new: str, force: bool = False) -> Profile:
        """
        Rename a profile.

        Raises:
            ValidationError: If a name is empty or both names are equal
            NotFoundError: If the profile does not exist
            AlreadyExistsError: If the new name exists and force is False
            FileError: If the old file could not be removed after saving
        """
        self._check_transfer(old, new, force)
        validate_name(new, RESOURCE_TYPE)

        profile = self.load(old)
        profile.name = new
        profile.touch()
        self._replace_key(profile, old)

        logger.info(f"Renamed profile '{old}' to '{new}'")
        return profile

    def copy(self, src: str, dest: str, force: bool = False) -> Profile:
        """
        Copy a profile's server references under a new name.

        Raises:
            ValidationError: If a name is empty or both names are equal
            NotFoundError: If the source does not exist
            AlreadyExistsError: If the destination exists and force is False
        """
        self._check_transfer(src, dest, force)
        validate_name(dest, RESOURCE_TYPE)

        source = self.load(src)
        now = fresh_timestamp_after(source.created_at)
        copied = source.model_copy(deep=True)
        copied.name = dest
        copied.created_at = now
        copied.updated_at = now

        self._save(copied)
        logger.info(f"Copied profile '{src}' to '{dest}'")
        return copied

    def add_server(
        self,
        profile_name: str,
        template_name: str,
        instance_name: Optional[str] = None,
        env_overrides: Optional[Dict[str, str]] = None,
    ) -> ServerRef:
        """
        Append a server reference to a profile.

        The instance name defaults to the template name. The template does
        not have to exist yet.

        Raises:
            ValidationError: If the template or instance name is invalid
            NotFoundError: If the profile does not exist
            DuplicateInstanceNameError: If the instance name is already used
        """
        validate_name(template_name, "server template")
        instance_name = instance_name or template_name
        validate_name(instance_name, "server")
        profile = self.load(profile_name)

        if profile.find_server(instance_name) is not None:
            raise DuplicateInstanceNameError(instance_name, profile_name)

        ref = ServerRef(name=instance_name, template=template_name)
        if env_overrides:
            ref.overrides = ServerOverrides(env=dict(env_overrides))

        profile.servers.append(ref)
        profile.touch()
        self._save(profile)

        logger.info(f"Added server '{instance_name}' to profile '{profile_name}'")
        return ref

    def remove_server(self, profile_name: str, instance_name: str) -> ServerRef:
        """
        Remove the first server reference with the given instance name.

        Raises:
            ValidationError: If the instance name is invalid
            NotFoundError: If the profile or the server reference does not exist
        """
        validate_name(instance_name, "server")
        profile = self.load(profile_name)

        for index, ref in enumerate(profile.servers):
            if ref.name == instance_name:
                removed = profile.servers.pop(index)
                break
        else:
            raise NotFoundError(
                "server",
                instance_name,
                message=f"Server '{instance_name}' not found in profile '{profile_name}'",
            )

        profile.touch()
        self._save(profile)

        logger.info(f"Removed server '{instance_name}' from profile '{profile_name}'")
        return removed

    def find_profiles_using_template(self, template_name: str) -> List[str]:
        """Names of profiles with at least one reference to the template."""
        profiles, _ = self.list_records()
        return [p.name for p in profiles if p.references_template(template_name)]

    def remove_template_references_from_all_profiles(self, template_name: str) -> List[str]:
        """
        Strip every reference to a template from every profile.

        Returns:
            Names of the profiles that were updated
        """
        updated: List[str] = []
        profiles, _ = self.list_records()

        for profile in profiles:
            if not profile.references_template(template_name):
                continue

            before = len(profile.servers)
            profile.servers = [ref for ref in profile.servers if ref.template != template_name]
            profile.touch()
            self._save(profile)
            updated.append(profile.name)

            logger.info(
                f"Removed {before - len(profile.servers)} reference(s) to "
                f"'{template_name}' from profile '{profile.name}'"
            )

        return updated

    def merge(self, dest_name: str, source_names: Sequence[str], force: bool = False) -> Profile:
        """
        Merge several profiles into a new one.

        Sources are processed in the order given and each source's
        references in stored order. The first reference seen for an
        instance name wins; later ones with the same name are dropped.

        Raises:
            ValidationError: If no source profile is given
            AlreadyExistsError: If the destination exists and force is False
            NotFoundError: If a source profile does not exist
        """
        if not source_names:
            raise ValidationError("At least one source profile is required",
                                  error_code="NO_SOURCES")
        validate_name(dest_name, RESOURCE_TYPE)

        if self.exists(dest_name) and not force:
            raise AlreadyExistsError(RESOURCE_TYPE, dest_name)

        for source_name in source_names:
            if not self.exists(source_name):
                raise NotFoundError(RESOURCE_TYPE, source_name)

        sources = [self.load(source_name) for source_name in source_names]

        merged = Profile(
            name=dest_name,
            description=f"Merged from {', '.join(source_names)}",
        )
        placed = set()
        skipped = 0

        for source in sources:
            for ref in source.servers:
                if ref.name in placed:
                    skipped += 1
                    logger.debug(
                        f"Skipping duplicate server '{ref.name}' from profile '{source.name}'"
                    )
                    continue
                placed.add(ref.name)
                merged.servers.append(ref.model_copy(deep=True))

        self._save(merged)
        logger.info(
            f"Merged {len(sources)} profile(s) into '{dest_name}': "
            f"{len(merged.servers)} server(s), {skipped} duplicate(s) skipped"
        )
        return merged

    def save_from_mcp_config(
        self,
        name: str,
        mcp_config_path: Union[str, Path],
        template_store: "TemplateStore",
        force: bool = False,
    ) -> Profile:
        """
        Capture an MCP configuration file as a profile.

        Each server entry becomes a reference to a template of the same
        name; missing templates are created from the entry and existing
        ones are reused unchanged.

        Raises:
            AlreadyExistsError: If the profile exists and force is False
            FileError, FormatError: If the configuration cannot be read
        """
        validate_name(name, RESOURCE_TYPE)
        if self.exists(name) and not force:
            raise AlreadyExistsError(RESOURCE_TYPE, name)

        mcp_config = load_mcp_config(mcp_config_path)
        profile = Profile(name=name, description=f"Saved from {mcp_config_path}")

        for server_name in sorted(mcp_config.mcp_servers):
            if template_store.exists(server_name):
                logger.info(f"Reusing existing server template '{server_name}'")
            else:
                template_store.save_from_config(server_name, mcp_config.mcp_servers[server_name])
            profile.servers.append(ServerRef(name=server_name, template=server_name))

        self._save(profile)
        logger.info(f"Saved profile '{name}' with {len(profile.servers)} server(s)")
        return profile
