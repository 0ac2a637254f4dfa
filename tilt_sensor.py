"""
Tilt Sensor: replay recorded phone tilt through the breath coach.

Reads orientation samples from a CSV file (or stdin), runs them through the
breath detector at their recorded times, scores the session and prints the
result as JSON.

Accepted line formats:
  timestamp_ms,beta[,gamma]
  beta                      (samples spaced at the tick rate)

Usage:
  python tilt_sensor.py recording.csv [--duration 60] [--tick-hz 60] [--speak]
  cat recording.csv | python tilt_sensor.py -

Requires: numpy (pyttsx3 and sounddevice for --speak)
"""

import sys
import json
import argparse
import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from breathcoach import BreathCoach, SessionConfig, ToneGuide, make_notifier

logging.basicConfig(
    level=logging.INFO,
    format='[breathcoach] %(levelname)s %(message)s',
    stream=sys.stderr,
)
log = logging.getLogger('tilt-sensor')

Sample = Tuple[float, float, Optional[float]]


def parse_samples(lines: Iterable[str], tick_hz: float) -> Iterator[Sample]:
    """Yield (timestamp_ms, beta, gamma) from CSV lines.

    Blank lines, comments and non-numeric header rows are skipped.
    """
    step_ms = 1000.0 / tick_hz
    index = 0
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        fields = [f.strip() for f in line.split(',')]
        try:
            values = [float(f) if f else None for f in fields]
        except ValueError:
            log.debug(f'Skipping non-numeric line {lineno}: {line!r}')
            continue
        if len(values) > 1 and values[0] is None:
            log.debug(f'Skipping line {lineno} without a timestamp')
            continue
        if len(values) == 1:
            yield index * step_ms, values[0], 0.0
        elif len(values) == 2:
            yield values[0], values[1], 0.0
        else:
            yield values[0], values[1], values[2]
        index += 1


def replay(samples: Iterable[Sample], coach: BreathCoach) -> dict:
    """Feed samples through a session and return the final coach status."""
    samples = list(samples)
    if not samples:
        log.warning('No samples to replay')
    t0 = samples[0][0] if samples else 0.0
    coach.begin_session(t0)

    for t, beta, gamma in samples:
        coach.on_orientation(beta, gamma, t)
        coach.tick(t)
        if not coach.session.is_active:
            break

    if coach.session.is_active:
        # Recording ended early; the session still closes at its nominal length
        coach.tick(t0 + coach.config.duration_s * 1000.0)
    return coach.status()


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description='Replay tilt samples through the breath coach')
    parser.add_argument('input', help="CSV file of samples, or '-' for stdin")
    parser.add_argument('--duration', type=int, default=None, help='Session length in seconds')
    parser.add_argument('--tick-hz', type=float, default=None, help='Spacing for bare beta samples')
    parser.add_argument('--speak', action='store_true', help='Speak prompts and play guide tones')
    parser.add_argument('--verbose', action='store_true', help='Log every detected breath')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    env = SessionConfig.from_env()
    config = SessionConfig(
        duration_s=args.duration or env.duration_s,
        tick_hz=args.tick_hz or env.tick_hz,
    )
    notifier = make_notifier('speech' if args.speak else 'log')
    coach = BreathCoach(config=config, notifier=notifier,
                        guide=ToneGuide() if args.speak else None)

    try:
        if args.input == '-':
            result = replay(parse_samples(sys.stdin, config.tick_hz), coach)
        else:
            with open(args.input, 'r', encoding='utf-8') as f:
                result = replay(parse_samples(f, config.tick_hz), coach)
    finally:
        notifier.close()

    print(json.dumps(result, indent=2))
    return result


if __name__ == '__main__':
    main()
