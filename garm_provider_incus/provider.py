"""Instance lifecycle operations against Incus."""

import logging
from typing import Optional

from pylxd.exceptions import LXDAPIException, NotFound

from .client import IncusClient, get_client_from_config
from .config import IncusConfig
from .errors import InstanceNotFoundError, ProviderError
from .instance import HypervisorInstance
from .mapper import incus_instance_to_provider_instance
from .models import ProviderInstance

logger = logging.getLogger(__name__)


class IncusProvider:
    """GARM provider operations for one controller on one Incus server."""

    def __init__(self, client: IncusClient, controller_id: str):
        self.client = client
        self.controller_id = controller_id

    @classmethod
    def from_config(
        cls,
        config: IncusConfig,
        controller_id: str,
        timeout: Optional[float] = None,
    ) -> "IncusProvider":
        """Validate config, connect, and return a provider."""
        config.validate()
        return cls(get_client_from_config(config, timeout=timeout), controller_id)

    def close(self) -> None:
        """Release the client and any credential files it owns."""
        self.client.close()

    def __enter__(self) -> "IncusProvider":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, name: str):
        try:
            return self.client.instances.get(name)
        except NotFound as e:
            raise InstanceNotFoundError(name) from e
        except LXDAPIException as e:
            logger.error(f"Failed to get instance {name}: {e}")
            raise ProviderError(f"fetching instance {name}: {e}") from e

    def _to_provider_instance(self, instance) -> ProviderInstance:
        try:
            state = instance.state()
            hypervisor_instance = HypervisorInstance.from_pylxd(instance, state)
        except NotFound as e:
            raise InstanceNotFoundError(instance.name) from e
        except LXDAPIException as e:
            raise ProviderError(f"fetching state of instance {instance.name}: {e}") from e
        return incus_instance_to_provider_instance(hypervisor_instance)

    def _owned_instances(self) -> list[tuple]:
        """Return (instance, config) pairs for instances this controller created.

        Instances deleted while the listing is in progress are skipped.
        """
        try:
            instances = self.client.instances.all(recursion=1)
        except LXDAPIException as e:
            logger.error(f"Failed to list instances: {e}")
            raise ProviderError(f"listing instances: {e}") from e

        owned = []
        for inst in instances:
            try:
                config = HypervisorInstance.from_pylxd(inst).config
            except NotFound:
                logger.info(f"Instance {inst.name} disappeared while listing")
                continue
            except LXDAPIException as e:
                raise ProviderError(f"fetching instance {inst.name}: {e}") from e
            if config.controller_id == self.controller_id:
                owned.append((inst, config))
        return owned

    def get_instance(self, name: str) -> ProviderInstance:
        """Get an instance by name.

        Raises:
            InstanceNotFoundError: If the instance does not exist
        """
        return self._to_provider_instance(self._get(name))

    def list_instances(self, pool_id: str) -> list[ProviderInstance]:
        """List this controller's instances that belong to pool_id."""
        result = []
        for inst, config in self._owned_instances():
            if config.pool_id != pool_id:
                continue
            try:
                result.append(self._to_provider_instance(inst))
            except InstanceNotFoundError:
                logger.info(f"Instance {inst.name} disappeared while listing")
        return result

    def delete_instance(self, name: str) -> None:
        """Stop and delete an instance. A missing instance is not an error."""
        try:
            instance = self._get(name)
        except InstanceNotFoundError:
            logger.info(f"Instance {name} already gone")
            return

        self._delete(instance)

    def _delete(self, instance) -> None:
        try:
            if instance.status.lower() == "running":
                instance.stop(force=True, wait=True)
            instance.delete(wait=True)
        except NotFound:
            return
        except LXDAPIException as e:
            logger.error(f"Failed to delete instance {instance.name}: {e}")
            raise ProviderError(f"deleting instance {instance.name}: {e}") from e
        logger.info(f"Deleted instance {instance.name}")

    def remove_all_instances(self) -> None:
        """Delete every instance created by this controller."""
        for inst, _ in self._owned_instances():
            self._delete(inst)

    def stop(self, name: str, force: bool = False) -> None:
        """Stop an instance."""
        instance = self._get(name)
        try:
            instance.stop(force=force, wait=True)
        except LXDAPIException as e:
            raise ProviderError(f"stopping instance {name}: {e}") from e
        logger.info(f"Stopped instance {name}")

    def start(self, name: str) -> None:
        """Start an instance."""
        instance = self._get(name)
        try:
            instance.start(wait=True)
        except LXDAPIException as e:
            raise ProviderError(f"starting instance {name}: {e}") from e
        logger.info(f"Started instance {name}")
