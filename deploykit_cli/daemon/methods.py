"""The closed set of methods exposed by the Deploykit daemon."""

from __future__ import annotations

from enum import Enum


class DaemonMethod(Enum):
    """A daemon RPC: wire name, number of string arguments, read-only flag.

    Read-only methods may be retried on transport failure; everything else
    changes daemon state and is sent at most once.
    """

    SET_CONFIG = ("set_config", 2, False)
    GET_CONFIG = ("get_config", 1, True)
    GET_PROGRESS = ("get_progress", 0, True)
    RESET_CONFIG = ("reset_config", 0, False)
    GET_LIST_DEVICES = ("get_list_devices", 0, True)
    AUTO_PARTITION = ("auto_partition", 1, False)
    START_INSTALL = ("start_install", 0, False)
    GET_AUTO_PARTITION_PROGRESS = ("get_auto_partition_progress", 0, True)
    GET_LIST_PARTITIONS = ("get_list_partitions", 1, True)
    GET_RECOMMEND_SWAP_SIZE = ("get_recommend_swap_size", 0, True)
    GET_MEMORY = ("get_memory", 0, True)
    FIND_ESP_PARTITION = ("find_esp_partition", 1, True)
    CANCEL_INSTALL = ("cancel_install", 0, False)
    DISK_IS_RIGHT_COMBO = ("disk_is_right_combo", 1, True)
    PING = ("ping", 0, True)
    GET_ALL_ESP_PARTITIONS = ("get_all_esp_partitions", 0, True)
    RESET_PROGRESS_STATUS = ("reset_progress_status", 0, False)
    SYNC_DISK = ("sync_disk", 0, False)
    SYNC_AND_REBOOT = ("sync_and_reboot", 0, False)
    IS_LVM_DEVICE = ("is_lvm_device", 1, True)
    IS_EFI = ("is_efi", 0, True)

    def __init__(self, wire_name: str, arity: int, read_only: bool):
        self.wire_name = wire_name
        self.arity = arity
        self.read_only = read_only

    @property
    def dbus_name(self) -> str:
        """D-Bus member name, e.g. ``get_list_devices`` -> ``GetListDevices``."""
        return "".join(part.capitalize() for part in self.wire_name.split("_"))

    def check_args(self, args: tuple) -> None:
        if len(args) != self.arity:
            raise ValueError(
                f"{self.wire_name} takes {self.arity} argument(s), got {len(args)}"
            )
        for arg in args:
            if not isinstance(arg, str):
                raise ValueError(
                    f"{self.wire_name} arguments must be strings, got {type(arg).__name__}"
                )
