#!/usr/bin/env python3
"""
Example usage of the tty_relay module

This script demonstrates:
- Finding the relay by its USB id (or using --tty)
- Switching power on and off
- Power-cycling with a timer
- Proper cleanup

Anything plugged into the relay WILL lose power while this runs.
"""

import argparse
import logging
import sys
import time

# Add src to path so we can import tty_relay
sys.path.insert(0, "src")

from tty_relay import Polarity, RelayError, get_relay


def main():
    """Run example relay sequence"""
    parser = argparse.ArgumentParser(description="Exercise a USB serial power relay.")
    parser.add_argument("--tty", help="serial device (default: find by USB id)")
    parser.add_argument("--nc", action="store_true", help="board is normally closed")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    polarity = Polarity.NORMALLY_CLOSED if args.nc else Polarity.NORMALLY_OPEN

    print("TTY Power Relay - Example Usage")
    print("=" * 60)

    # Use context manager for automatic disconnection
    with get_relay(args.tty, polarity=polarity) as relay:
        print(f"\nConnected to {relay.port} ({relay.polarity.name})")

        # Example 1: Power on
        print("\n" + "=" * 60)
        print("Example 1: Power on")
        relay.on()
        print("✓ Power ON")

        time.sleep(2)

        # Example 2: Power off
        print("\n" + "=" * 60)
        print("Example 2: Power off")
        relay.off()
        print("✓ Power OFF")

        time.sleep(2)

        # Example 3: Power-cycle: off now, back on after 3 s
        print("\n" + "=" * 60)
        print("Example 3: Power-cycle with timed_on(3)")
        relay.timed_on(3)
        print("✓ Power OFF, timer armed")
        time.sleep(4)
        print("✓ Timer should have switched power back ON")

        # Example 4: Jog
        print("\n" + "=" * 60)
        print("Example 4: Jog")
        relay.jog()
        print("✓ Jog sent")

        print("\n" + "=" * 60)
        print("Example complete!")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
    except RelayError as e:
        print(f"\nError: {e}")
        sys.exit(1)
