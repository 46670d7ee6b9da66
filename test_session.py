"""Full send operation against fake hardware."""

import pytest
import serial

from cosirelay.errors import NoPortAvailableError, SendError, WriteError
from cosirelay.models import SerialConfig
from cosirelay.transport import SerialTransport, normalize_program

from conftest import FakeOpener, broken_enumerator, fixed_ports


def make_transport(opener, enumerator=fixed_ports()):
    return SerialTransport(enumerator=enumerator, opener=opener)


def test_send_writes_normalized_program_and_reads_reply():
    opener = FakeOpener(available={"COM1"}, reply=b"OK\r")
    program = "00 ho\r\n\r\n00 mv 1\n"

    result = make_transport(opener).send(program, SerialConfig())

    port = opener.ports[0]
    assert bytes(port.written) == b"00 ho\r00 mv 1\r"
    assert result.result == "sent"
    assert result.serial_port == "COM1"
    assert result.length == len(program)
    assert result.serial_written == len((normalize_program(program) + "\r").encode())
    assert result.serial_reply == "OK\r"
    assert port.timeout == 2.0
    assert port.closed


def test_no_reply_is_not_an_error():
    opener = FakeOpener(available={"COM1"})

    result = make_transport(opener).send("00 ve", SerialConfig())

    assert result.serial_reply is None
    assert "serial_reply" not in result.model_dump(exclude_none=True)
    assert opener.ports[0].closed


def test_reply_bounded_by_buffer():
    opener = FakeOpener(available={"COM1"}, reply=b"x" * 1000)

    result = SerialTransport(fixed_ports(), opener, read_buffer_size=256).send("00 ve", SerialConfig())

    assert len(result.serial_reply) == 256


def test_length_counts_characters_not_bytes():
    opener = FakeOpener(available={"COM1"})
    program = "00 °\n"

    result = make_transport(opener).send(program, SerialConfig())

    assert result.length == 5
    assert result.serial_written == len("00 °\r".encode())


def test_env_override_wins_over_config():
    opener = FakeOpener(available={"COM1", "/dev/ttyUSB0"})

    result = make_transport(opener).send("00 ho", SerialConfig(port_name="COM1"), "/dev/ttyUSB0")

    assert result.serial_port == "/dev/ttyUSB0"
    assert opener.attempts == ["/dev/ttyUSB0"]


def test_empty_env_override_falls_back_to_config():
    opener = FakeOpener(available={"COM3"})

    result = make_transport(opener).send("00 ho", SerialConfig(port_name="COM3"), "")

    assert result.serial_port == "COM3"


def test_falls_back_to_enumerated_port():
    opener = FakeOpener(available={"/dev/ttyACM0"})

    result = make_transport(opener, fixed_ports("/dev/ttyACM0")).send("00 ho", SerialConfig(port_name="COM3"))

    assert result.serial_port == "/dev/ttyACM0"
    assert opener.attempts == ["COM3", "COM1", "COM2", "/dev/ttyACM0"]


def test_enumeration_failure_is_tolerated():
    opener = FakeOpener(available={"COM2"})

    result = make_transport(opener, broken_enumerator).send("00 ho", SerialConfig(port_name="COM9"))

    assert result.serial_port == "COM2"


def test_all_ports_fail_nothing_written():
    opener = FakeOpener(available=())

    with pytest.raises(NoPortAvailableError) as exc:
        make_transport(opener, fixed_ports("COM4")).send("00 ho", SerialConfig())

    assert isinstance(exc.value, SendError)
    assert opener.ports == []
    assert opener.attempts == ["COM1", "COM2", "COM4"]


def test_write_failure_closes_port():
    opener = FakeOpener(available={"COM1"}, write_error=serial.SerialTimeoutException("Write timeout"))

    with pytest.raises(WriteError, match="Write timeout"):
        make_transport(opener).send("00 ho", SerialConfig())

    assert opener.ports[0].closed


def test_short_write_reported_verbatim():
    opener = FakeOpener(available={"COM1"}, short_write=3)

    result = make_transport(opener).send("00 ho", SerialConfig())

    assert result.serial_written == 3


def test_result_is_immutable():
    opener = FakeOpener(available={"COM1"})
    result = make_transport(opener).send("00 ho", SerialConfig())

    with pytest.raises(Exception):
        result.serial_written = 0
