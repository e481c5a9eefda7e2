"""Request/response wrapper around the Deploykit daemon.

Every daemon method answers with a JSON string of the form
``{"result": "Ok" | "Error", "data": ...}``. ``DaemonClient.call`` decodes
that envelope and turns ``result=Error`` into ``RpcFailure``; the typed
helpers below decode ``data`` into domain objects.

Only one call is ever in flight: calls are serialised by a re-entrant lock
so the cancellation path can share the client with the main flow.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

from deploykit_cli.domain import (
    AutoPartitionProgress,
    ConfigField,
    Device,
    Partition,
    ProgressState,
    parse_progress,
)
from deploykit_cli.logging import REDACTED, LoggerFactory

from .exceptions import DaemonUnavailableError, DecodeError, RpcFailure
from .methods import DaemonMethod
from .transport import Transport

log = LoggerFactory.for_daemon()
poll_log = LoggerFactory.for_poll()

POLL_METHODS = frozenset(
    {DaemonMethod.GET_PROGRESS, DaemonMethod.GET_AUTO_PARTITION_PROGRESS}
)

T = TypeVar("T")


class EnvelopeResult(Enum):
    OK = "Ok"
    ERROR = "Error"


@dataclass(frozen=True)
class Envelope:
    result: EnvelopeResult
    data: Any

    @classmethod
    def decode(cls, raw: str) -> Envelope:
        """Parse a raw reply; raises DecodeError if it is not an envelope."""
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as error:
            raise DecodeError(f"Daemon reply is not valid JSON: {error}", raw=raw) from error

        if not isinstance(parsed, dict) or "result" not in parsed:
            raise DecodeError("Daemon reply is missing the result field", raw=raw)
        try:
            result = EnvelopeResult(parsed["result"])
        except ValueError as error:
            raise DecodeError(
                f"Unknown result in daemon reply: {parsed['result']!r}", raw=raw
            ) from error
        return cls(result=result, data=parsed.get("data"))


def _loggable_args(method: DaemonMethod, args: tuple[str, ...]) -> tuple[str, ...]:
    if method is DaemonMethod.SET_CONFIG and args and args[0] == ConfigField.USER.value:
        return (args[0], REDACTED)
    return args


class DaemonClient:
    """Typed client for the daemon RPC surface."""

    def __init__(self, transport: Transport, read_retries: int = 0) -> None:
        self.transport = transport
        self.read_retries = max(0, read_retries)
        self._lock = threading.RLock()

    def call(self, method: DaemonMethod, *args: str) -> Envelope:
        """Issue one request and return the Ok envelope.

        Raises:
            ValueError: Wrong number or type of arguments for ``method``
            DaemonUnavailableError: The request could not be delivered
            DecodeError: The reply is not a well-formed envelope
            RpcFailure: The daemon answered with result=Error
        """
        method.check_args(args)
        call_log = poll_log if method in POLL_METHODS else log
        call_log.debug(f"-> {method.wire_name}{_loggable_args(method, args)}")

        with self._lock:
            raw = self._invoke(method, args)

        envelope = Envelope.decode(raw)
        if envelope.result is EnvelopeResult.ERROR:
            log.error(f"{method.wire_name} failed: {envelope.data!r}")
            raise RpcFailure(method.wire_name, envelope.data)

        call_log.debug(f"<- {method.wire_name}: {envelope.data!r}")
        return envelope

    def _invoke(self, method: DaemonMethod, args: tuple[str, ...]) -> str:
        attempts = 1 + (self.read_retries if method.read_only else 0)
        for attempt in range(1, attempts):
            try:
                return self.transport.invoke(method, args)
            except DaemonUnavailableError as error:
                log.warning(
                    f"{method.wire_name} attempt {attempt}/{attempts} failed: {error}"
                )
        return self.transport.invoke(method, args)

    def _decode(self, method: DaemonMethod, decoder: Callable[[Any], T], data: Any) -> T:
        try:
            return decoder(data)
        except (KeyError, TypeError, ValueError) as error:
            raise DecodeError(
                f"Unexpected {method.wire_name} payload: {error}", raw=data
            ) from error

    def _bool(self, method: DaemonMethod, *args: str) -> bool:
        data = self.call(method, *args).data
        if not isinstance(data, bool):
            raise DecodeError(f"{method.wire_name} did not return a boolean", raw=data)
        return data

    def _partitions(self, method: DaemonMethod, *args: str) -> list[Partition]:
        data = self.call(method, *args).data
        return self._decode(
            method, lambda items: [Partition.from_dict(item) for item in items], data
        )

    # --- configuration -----------------------------------------------------

    def set_config(self, field: ConfigField | str, value: str) -> Any:
        name = field.value if isinstance(field, ConfigField) else field
        return self.call(DaemonMethod.SET_CONFIG, name, value).data

    def get_config(self, field: ConfigField | str) -> Any:
        name = field.value if isinstance(field, ConfigField) else field
        return self.call(DaemonMethod.GET_CONFIG, name).data

    def reset_config(self) -> Any:
        return self.call(DaemonMethod.RESET_CONFIG).data

    # --- storage queries ---------------------------------------------------

    def list_devices(self) -> list[Device]:
        method = DaemonMethod.GET_LIST_DEVICES
        data = self.call(method).data
        return self._decode(method, lambda items: [Device.from_dict(item) for item in items], data)

    def list_partitions(self, device: str) -> list[Partition]:
        return self._partitions(DaemonMethod.GET_LIST_PARTITIONS, device)

    def get_all_esp_partitions(self) -> list[Partition]:
        return self._partitions(DaemonMethod.GET_ALL_ESP_PARTITIONS)

    def find_esp_partition(self, device: str) -> Any:
        return self.call(DaemonMethod.FIND_ESP_PARTITION, device).data

    def disk_is_right_combo(self, device: str) -> Any:
        return self.call(DaemonMethod.DISK_IS_RIGHT_COMBO, device).data

    def is_lvm_device(self, device: str) -> bool:
        return self._bool(DaemonMethod.IS_LVM_DEVICE, device)

    def is_efi(self) -> bool:
        return self._bool(DaemonMethod.IS_EFI)

    def get_recommend_swap_size(self) -> Any:
        return self.call(DaemonMethod.GET_RECOMMEND_SWAP_SIZE).data

    def get_memory(self) -> Any:
        return self.call(DaemonMethod.GET_MEMORY).data

    def auto_partition(self, device: str) -> Any:
        return self.call(DaemonMethod.AUTO_PARTITION, device).data

    def get_auto_partition_progress(self) -> AutoPartitionProgress:
        method = DaemonMethod.GET_AUTO_PARTITION_PROGRESS
        return self._decode(method, AutoPartitionProgress.from_wire, self.call(method).data)

    # --- install job -------------------------------------------------------

    def start_install(self) -> Any:
        return self.call(DaemonMethod.START_INSTALL).data

    def get_progress(self) -> ProgressState:
        method = DaemonMethod.GET_PROGRESS
        return self._decode(method, parse_progress, self.call(method).data)

    def cancel_install(self) -> Any:
        return self.call(DaemonMethod.CANCEL_INSTALL).data

    def reset_progress_status(self) -> Any:
        return self.call(DaemonMethod.RESET_PROGRESS_STATUS).data

    # --- housekeeping ------------------------------------------------------

    def ping(self) -> Any:
        return self.call(DaemonMethod.PING).data

    def sync_disk(self) -> Any:
        return self.call(DaemonMethod.SYNC_DISK).data

    def sync_and_reboot(self) -> Any:
        return self.call(DaemonMethod.SYNC_AND_REBOOT).data
