#!/usr/bin/env python3
"""
Serial port diagnostic tool for the Cosirob controller link
"""

import argparse
import sys

import serial

from cosirelay.errors import EnumerationError, SendError
from cosirelay.models import SerialConfig
from cosirelay.transport import SerialTransport, describe_ports, open_serial, resolve_candidates


def list_serial_ports():
    """List all available serial ports"""
    print("Available serial ports:")
    try:
        ports = describe_ports()
    except EnumerationError as e:
        print(f"  ❌ {e}")
        return []

    for device, description in ports:
        print(f"  {device} - {description}")
    if not ports:
        print("  (none)")
    print()
    return [device for device, _ in ports]


def test_serial_port(port_name, cfg):
    """Test if a serial port can be opened with the given line parameters"""
    try:
        ser = open_serial(port_name, cfg)
    except (serial.SerialException, OSError, ValueError) as e:
        print(f"❌ Failed to open {port_name}: {e}")
        return False

    print(f"✅ Successfully opened {port_name}")
    print(f"   Settings: {ser.baudrate} baud, {ser.bytesize} bits, parity={ser.parity}, stopbits={ser.stopbits}")
    ser.close()
    return True


def send_program(program, cfg):
    """Send a program through the same path the HTTP API uses"""
    print(f"Sending {program!r}...")
    try:
        result = SerialTransport().send(program, cfg)
    except SendError as e:
        print(f"❌ {e}")
        return False

    print(f"✅ Sent via {result.serial_port}: {result.serial_written} bytes")
    if result.serial_reply is not None:
        print(f"   Reply: {result.serial_reply!r}")
    else:
        print("   No reply")
    return True


def main():
    parser = argparse.ArgumentParser(description="Serial port diagnostic tool")
    parser.add_argument("--port", default=SerialConfig().port_name, help="preferred port")
    parser.add_argument("--baud", type=int, default=SerialConfig().baud_rate)
    parser.add_argument("--send", metavar="TEXT", help="program to send after probing")
    args = parser.parse_args()

    print("🔧 Serial Port Diagnostic Tool\n")

    cfg = SerialConfig(port_name=args.port, baud_rate=args.baud)
    enumerated = list_serial_ports()

    candidates = resolve_candidates(cfg.port_name, enumerated)
    print(f"Candidate order: {candidates}\n")

    working_ports = [p for p in candidates if p and test_serial_port(p, cfg)]

    if not working_ports:
        print("\n❌ No working serial ports found")
        print("Check:")
        print("1. USB-to-serial adapter is connected")
        print("2. Controller is powered on")
        print("3. No other program holds the port")
        return 1

    print(f"\n✅ Working ports found: {working_ports}")
    print(f"\n🔧 To force this port, set environment variable:")
    print(f"export SERIAL_PORT={working_ports[0]}")

    if args.send:
        print()
        return 0 if send_program(args.send, cfg) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
