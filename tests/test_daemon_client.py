"""
Tests for deploykit_cli.daemon.client.

This test suite covers:
- Envelope decoding and malformed replies
- result=Error surfacing as RpcFailure with the payload intact
- Argument checking before anything is sent
- Retry of read-only calls on transport failure
- Typed helpers decoding daemon payloads into domain objects
"""

import json

import pytest
from conftest import error, ok

from deploykit_cli.daemon.client import DaemonClient, Envelope, EnvelopeResult, _loggable_args
from deploykit_cli.daemon.exceptions import DaemonUnavailableError, DecodeError, RpcFailure
from deploykit_cli.daemon.methods import DaemonMethod
from deploykit_cli.domain import (
    AutoPartitionProgress,
    ConfigField,
    Device,
    Partition,
    ProgressError,
    ProgressFinish,
    ProgressPending,
    ProgressWorking,
)


class TestEnvelope:
    """Tests for Envelope.decode()."""

    def test_decodes_ok(self):
        envelope = Envelope.decode('{"result": "Ok", "data": [1, 2]}')
        assert envelope.result is EnvelopeResult.OK
        assert envelope.data == [1, 2]

    def test_decodes_error(self):
        envelope = Envelope.decode('{"result": "Error", "data": {"message": "busy"}}')
        assert envelope.result is EnvelopeResult.ERROR
        assert envelope.data == {"message": "busy"}

    def test_missing_data_is_none(self):
        assert Envelope.decode('{"result": "Ok"}').data is None

    def test_invalid_json(self):
        with pytest.raises(DecodeError) as exc_info:
            Envelope.decode("not json")
        assert exc_info.value.raw == "not json"

    def test_not_an_object(self):
        with pytest.raises(DecodeError):
            Envelope.decode("[1, 2, 3]")

    def test_missing_result(self):
        with pytest.raises(DecodeError):
            Envelope.decode('{"data": 1}')

    def test_unknown_result(self):
        with pytest.raises(DecodeError, match="Unknown result"):
            Envelope.decode('{"result": "Maybe", "data": 1}')


class TestCall:
    """Tests for DaemonClient.call()."""

    def test_returns_ok_envelope(self, client, transport):
        transport.script(DaemonMethod.GET_MEMORY, ok(8589934592))

        envelope = client.call(DaemonMethod.GET_MEMORY)

        assert envelope.data == 8589934592
        assert transport.calls == [(DaemonMethod.GET_MEMORY, ())]

    def test_error_result_raises_rpc_failure_with_payload(self, client, transport):
        payload = {"message": "Partition not found", "t": "SetConfig"}
        transport.script(DaemonMethod.START_INSTALL, error(payload))

        with pytest.raises(RpcFailure) as exc_info:
            client.call(DaemonMethod.START_INSTALL)

        assert exc_info.value.method == "start_install"
        assert exc_info.value.payload == payload

    def test_wrong_arity_sends_nothing(self, client, transport):
        with pytest.raises(ValueError, match="takes 2 argument"):
            client.call(DaemonMethod.SET_CONFIG, "hostname")
        assert transport.calls == []

    def test_non_string_argument_sends_nothing(self, client, transport):
        with pytest.raises(ValueError, match="must be strings"):
            client.call(DaemonMethod.IS_LVM_DEVICE, 1)
        assert transport.calls == []

    def test_malformed_reply_raises_decode_error(self, client, transport):
        transport.script(DaemonMethod.PING, "garbage")
        with pytest.raises(DecodeError):
            client.call(DaemonMethod.PING)

    def test_unavailable_propagates_without_retry_by_default(self, client, transport):
        transport.script(DaemonMethod.PING, DaemonUnavailableError("ping", "no bus"))
        with pytest.raises(DaemonUnavailableError):
            client.call(DaemonMethod.PING)
        assert len(transport.calls) == 1


class TestReadRetries:
    """Tests for retrying read-only calls."""

    def test_read_only_call_is_retried(self, transport):
        client = DaemonClient(transport, read_retries=2)
        transport.script(
            DaemonMethod.GET_LIST_DEVICES,
            DaemonUnavailableError("get_list_devices", "timeout"),
            ok([]),
        )

        assert client.list_devices() == []
        assert transport.methods() == [DaemonMethod.GET_LIST_DEVICES] * 2

    def test_retries_are_bounded(self, transport):
        client = DaemonClient(transport, read_retries=1)
        failure = DaemonUnavailableError("is_efi", "timeout")
        transport.script(DaemonMethod.IS_EFI, failure, failure, ok(True))

        with pytest.raises(DaemonUnavailableError):
            client.is_efi()
        assert len(transport.calls) == 2

    def test_last_attempt_error_is_raised(self, transport):
        client = DaemonClient(transport, read_retries=2)
        first = DaemonUnavailableError("get_memory", "timeout")
        last = DaemonUnavailableError("get_memory", "no reply")
        transport.script(DaemonMethod.GET_MEMORY, first, first, last)

        with pytest.raises(DaemonUnavailableError) as exc_info:
            client.get_memory()
        assert exc_info.value is last
        assert len(transport.calls) == 3

    def test_mutating_call_is_never_retried(self, transport):
        client = DaemonClient(transport, read_retries=3)
        transport.script(
            DaemonMethod.START_INSTALL,
            DaemonUnavailableError("start_install", "timeout"),
        )

        with pytest.raises(DaemonUnavailableError):
            client.start_install()
        assert len(transport.calls) == 1

    def test_rpc_failure_is_not_retried(self, transport):
        client = DaemonClient(transport, read_retries=3)
        transport.script(DaemonMethod.GET_MEMORY, error("nope"))

        with pytest.raises(RpcFailure):
            client.get_memory()
        assert len(transport.calls) == 1

    def test_negative_retries_clamped(self, transport):
        assert DaemonClient(transport, read_retries=-5).read_retries == 0


class TestLoggableArgs:
    """Tests for redacting credentials from call logs."""

    def test_user_value_redacted(self):
        args = ("user", '{"username": "a", "password": "secret", "full_name": "A"}')
        assert _loggable_args(DaemonMethod.SET_CONFIG, args) == ("user", "********")

    def test_other_fields_untouched(self):
        args = ("hostname", "aosc")
        assert _loggable_args(DaemonMethod.SET_CONFIG, args) == args


class TestConfigurationMethods:
    """Tests for set_config/get_config/reset_config."""

    def test_set_config_with_field(self, client, transport):
        client.set_config(ConfigField.HOSTNAME, "aosc")
        assert transport.calls == [(DaemonMethod.SET_CONFIG, ("hostname", "aosc"))]

    def test_set_config_with_name(self, client, transport):
        client.set_config("timezone", "Asia/Shanghai")
        assert transport.calls == [(DaemonMethod.SET_CONFIG, ("timezone", "Asia/Shanghai"))]

    def test_get_config_returns_data(self, client, transport):
        transport.script(DaemonMethod.GET_CONFIG, ok("aosc"))
        assert client.get_config(ConfigField.HOSTNAME) == "aosc"
        assert transport.calls == [(DaemonMethod.GET_CONFIG, ("hostname",))]

    def test_reset_config(self, client, transport):
        client.reset_config()
        assert transport.methods() == [DaemonMethod.RESET_CONFIG]


class TestStorageQueries:
    """Tests for device and partition queries."""

    def test_list_devices(self, client, transport, devices_data):
        transport.script(DaemonMethod.GET_LIST_DEVICES, ok(devices_data))

        devices = client.list_devices()

        assert devices[0] == Device(
            model="Samsung SSD 970", path="/dev/nvme0n1", size=512110190592
        )
        assert [device.path for device in devices] == ["/dev/nvme0n1", "/dev/sda"]

    def test_list_devices_malformed_payload(self, client, transport):
        transport.script(DaemonMethod.GET_LIST_DEVICES, ok([{"model": "x"}]))
        with pytest.raises(DecodeError, match="get_list_devices"):
            client.list_devices()

    def test_list_partitions(self, client, transport, partitions_data):
        transport.script(DaemonMethod.GET_LIST_PARTITIONS, ok(partitions_data))

        partitions = client.list_partitions("/dev/sda")

        assert transport.calls == [(DaemonMethod.GET_LIST_PARTITIONS, ("/dev/sda",))]
        assert partitions[1] == Partition(
            path="/dev/sda2", parent_path="/dev/sda", fs_type="ext4", size=33821818880
        )
        assert partitions[2].path is None

    def test_get_all_esp_partitions(self, client, transport, partitions_data):
        transport.script(DaemonMethod.GET_ALL_ESP_PARTITIONS, ok(partitions_data[:1]))
        assert [p.path for p in client.get_all_esp_partitions()] == ["/dev/sda1"]

    def test_is_lvm_device(self, client, transport):
        transport.script(DaemonMethod.IS_LVM_DEVICE, ok(True))
        assert client.is_lvm_device("/dev/sda") is True

    def test_is_efi_rejects_non_boolean(self, client, transport):
        transport.script(DaemonMethod.IS_EFI, ok("yes"))
        with pytest.raises(DecodeError, match="boolean"):
            client.is_efi()

    def test_raw_queries_pass_data_through(self, client, transport):
        transport.script(DaemonMethod.FIND_ESP_PARTITION, ok({"path": "/dev/sda1"}))
        transport.script(DaemonMethod.DISK_IS_RIGHT_COMBO, ok(None))
        transport.script(DaemonMethod.GET_RECOMMEND_SWAP_SIZE, ok(4294967296))

        assert client.find_esp_partition("/dev/sda") == {"path": "/dev/sda1"}
        assert client.disk_is_right_combo("/dev/sda") is None
        assert client.get_recommend_swap_size() == 4294967296


class TestInstallJob:
    """Tests for install job methods."""

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"status": "Pending"}, ProgressPending()),
            ({"status": "Working", "step": 3, "progress": 42, "v": 0}, ProgressWorking(3, 42)),
            ({"status": "Finish"}, ProgressFinish()),
        ],
    )
    def test_get_progress(self, client, transport, payload, expected):
        transport.script(DaemonMethod.GET_PROGRESS, ok(payload))
        assert client.get_progress() == expected

    def test_get_progress_error_payload(self, client, transport):
        transport.script(
            DaemonMethod.GET_PROGRESS,
            ok({"status": "Error", "message": "mkfs failed", "t": "Format"}),
        )
        assert client.get_progress() == ProgressError(
            {"message": "mkfs failed", "t": "Format"}
        )

    def test_get_progress_unknown_status(self, client, transport):
        transport.script(DaemonMethod.GET_PROGRESS, ok({"status": "Sleeping"}))
        with pytest.raises(DecodeError):
            client.get_progress()

    def test_get_auto_partition_progress(self, client, transport):
        transport.script(
            DaemonMethod.GET_AUTO_PARTITION_PROGRESS,
            ok({"status": "Finish", "res": {"Ok": [{"path": "/dev/sda1"}]}}),
        )
        assert client.get_auto_partition_progress() == AutoPartitionProgress(
            status="Finish", succeeded=True, result=[{"path": "/dev/sda1"}]
        )

    def test_mutating_methods_send_expected_requests(self, client, transport):
        client.auto_partition("/dev/sda")
        client.start_install()
        client.cancel_install()
        client.reset_progress_status()
        client.ping()
        client.sync_disk()
        client.sync_and_reboot()

        assert transport.calls == [
            (DaemonMethod.AUTO_PARTITION, ("/dev/sda",)),
            (DaemonMethod.START_INSTALL, ()),
            (DaemonMethod.CANCEL_INSTALL, ()),
            (DaemonMethod.RESET_PROGRESS_STATUS, ()),
            (DaemonMethod.PING, ()),
            (DaemonMethod.SYNC_DISK, ()),
            (DaemonMethod.SYNC_AND_REBOOT, ()),
        ]

    def test_user_field_reaches_daemon_unredacted(self, client, transport):
        value = json.dumps({"username": "a", "password": "secret", "full_name": "A"})
        client.set_config(ConfigField.USER, value)
        assert transport.calls[0][1] == ("user", value)
