#!/usr/bin/env python3
"""VoiceLab: CLI entry point.

Usage:
    python main.py analyze --file <audio_path> [--json] [--allow-placeholder]
    python main.py synth [--freq HZ] [--amplitude A] [--vibrato HZ] [--noise LEVEL] [--json]
    python main.py thresholds
"""

import argparse
import json
import logging
import sys

import numpy as np

from voicelab import config
from voicelab.analysis import AnalysisResult
from voicelab.audio_io import AudioValidationError, load_file
from voicelab.engine import InsufficientSignalError, VoiceAnalysisEngine
from voicelab.frames import FrameValidationError, iter_frames


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _print_result(result: AnalysisResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print("\n" + "=" * 60)
    print("VOICE ANALYSIS RESULT")
    print("=" * 60)
    if result.signal_source != "measured":
        print("  NOTE: no usable signal was captured; values below are a placeholder.")
    pitch = f"{result.pitch_hz:.1f} Hz ({result.note})" if result.pitch_hz else "not detected"
    jitter = f"{result.jitter * 100:.2f}%" if result.jitter is not None else "n/a"
    print(f"  Pitch:         {pitch}")
    print(f"  Loudness:      {result.loudness:.4f}")
    print(f"  Jitter:        {jitter}")
    print(f"  Quality:       {result.quality_score:.0f}% ({result.quality_label})")
    print(f"  Risk level:    {result.risk_level}")

    print("\n  Clinical findings:")
    for f in result.findings:
        print(f"    [{f.status:<10}] {f.parameter}: {f.value} ({f.severity})")
    if not result.findings:
        print("    none")

    print("\n  Risk assessment:")
    for r in result.risks:
        print(f"    {r.label}: {r.risk_level} (confidence {r.confidence:.0%})")
        for indicator in r.indicators:
            print(f"      - {indicator}")
    if not result.risks:
        print("    no indicators")

    c = result.characteristics
    print("\n  Voice characteristics:")
    print(f"    Pitch stability: {c.pitch_stability:.0%}")
    print(f"    Quality:         {c.voice_quality}")
    print(f"    Articulation:    {c.articulation}")
    print(f"    Prosody:         {c.prosody}")
    print(f"    {c.overall_assessment}")

    print("\n  Recommendations:")
    for rec in result.recommendations:
        print(f"    * {rec}")


def cmd_analyze(args):
    try:
        audio, sr = load_file(args.file)
    except AudioValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    engine = VoiceAnalysisEngine(session_seconds=args.seconds)
    try:
        result = engine.run(
            iter_frames(audio, sr, frame_size=args.frame_size),
            allow_placeholder=args.allow_placeholder,
        )
    except (InsufficientSignalError, FrameValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    _print_result(result, args.json)


def cmd_synth(args):
    """Run a session over a generated vowel-like tone (useful to sanity-check thresholds)."""
    sr = config.DEFAULT_SAMPLE_RATE
    t = np.arange(int(sr * args.seconds)) / sr
    freq = args.freq + args.vibrato_depth * np.sin(2 * np.pi * args.vibrato * t)
    phase = 2 * np.pi * np.cumsum(freq) / sr
    audio = np.zeros_like(t)
    for k in range(1, 4):
        audio += (1.0 / k) * np.sin(k * phase)
    audio *= args.amplitude / np.sqrt(np.mean(audio ** 2))
    audio += args.noise * np.random.default_rng(args.seed).standard_normal(len(t))

    engine = VoiceAnalysisEngine(session_seconds=args.seconds)
    try:
        result = engine.run(iter_frames(audio, sr), allow_placeholder=args.allow_placeholder)
    except InsufficientSignalError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    _print_result(result, args.json)


def cmd_thresholds(args):
    tables = {
        "energy_floor": config.RMS_FLOOR,
        "pitch_range_hz": [config.PITCH_MIN_HZ, config.PITCH_MAX_HZ],
        "min_correlation": config.MIN_CORRELATION,
        "findings": {
            name: {k: rule[k] for k in ("abnormal", "borderline", "severe", "normal_range")}
            for name, rule in config.FINDING_RULES.items()
        },
        "risk": {
            name: {
                "high_above": rule_set["high_above"],
                "moderate_above": rule_set["moderate_above"],
                "rules": [
                    {"feature": f, "op": op, "threshold": thr, "weight": w, "indicator": ind}
                    for f, op, thr, w, ind, _ in rule_set["rules"]
                ],
            }
            for name, rule_set in config.RISK_RULES.items()
        },
    }
    print(json.dumps(tables, indent=2))


def main():
    parser = argparse.ArgumentParser(
        description="VoiceLab voice biomarker screening",
        formatter_class=argparse.RawDescriptionHelpFormatter, epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("analyze")
    p.add_argument("--file", type=str, required=True)
    p.add_argument("--seconds", type=float, default=config.SESSION_SECONDS)
    p.add_argument("--frame-size", type=int, default=config.FRAME_SIZE)
    p.add_argument("--allow-placeholder", action="store_true",
                   help="Analyze flagged placeholder values if no signal is found")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("synth")
    p.add_argument("--freq", type=float, default=150.0)
    p.add_argument("--amplitude", type=float, default=0.08, help="Target RMS")
    p.add_argument("--vibrato", type=float, default=5.0, help="Vibrato rate (Hz)")
    p.add_argument("--vibrato-depth", type=float, default=2.0, help="Vibrato depth (Hz)")
    p.add_argument("--noise", type=float, default=0.002)
    p.add_argument("--seconds", type=float, default=config.SESSION_SECONDS)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--allow-placeholder", action="store_true")
    p.add_argument("--json", action="store_true")

    sub.add_parser("thresholds")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    cmds = {
        "analyze": cmd_analyze,
        "synth": cmd_synth,
        "thresholds": cmd_thresholds,
    }
    cmds.get(args.command, lambda _: parser.print_help())(args)


if __name__ == "__main__":
    main()
