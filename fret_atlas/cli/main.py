"""Main entry point for the Fret Atlas CLI."""

import argparse
import sys
import time
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..errors import AudioDeviceError, FretAtlasError
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import DisplayMode, NoteSelection, Timbre
from ..note_utils import describe_positions, parse_note

logger = get_logger(__name__)

INTERACTIVE_HELP = """Enter a note (e.g. A4, Db3) optionally followed by 'guitar' or 'piano'.
Other commands: clear, flats, octaves, fretboard, keyboard, help, quit"""


def _display_mode(args: argparse.Namespace) -> DisplayMode:
    return DisplayMode(show_octave_numbers=args.octaves, show_flats=args.flats)


def _print_selection(selection: NoteSelection) -> None:
    print(selection.title)
    if selection.frequency is not None:
        print(f"  {selection.frequency:.2f} Hz")
    if selection.error is not None:
        print(f"  Not played: {selection.error}")
    print(f"  {selection.info}")


def _cell(note) -> str:
    return f"{note.label}*" if note.active else note.label


def _print_fretboard(reference) -> None:
    rows = reference.fretboard()
    width = max(len(_cell(note)) for row in rows for note in row) + 1
    print("   " + "".join(str(fret).rjust(width) for fret in range(len(rows[0]))))
    for string, row in zip(reference.mapper.strings, rows):
        print(f"{string.label:>2} " + "".join(_cell(note).rjust(width) for note in row))


def _print_keyboard(reference) -> None:
    keys = reference.keyboard()
    for start in range(0, len(keys), 12):
        print(" ".join(_cell(key) for key in keys[start : start + 12]))


def cmd_frequency(args: argparse.Namespace, factory: ComponentFactory) -> int:
    pitch = parse_note(args.note)
    frequency = factory.create_pitch_table().frequency_of(pitch.pitch_class, pitch.octave)
    print(f"{pitch}: {frequency:.2f} Hz")
    return 0


def cmd_positions(args: argparse.Namespace, factory: ComponentFactory) -> int:
    pitch = parse_note(args.note)
    positions = factory.create_position_mapper().positions_of(pitch.pitch_class, pitch.octave)
    print(describe_positions(positions))
    return 0


def cmd_fretboard(args: argparse.Namespace, factory: ComponentFactory) -> int:
    reference = factory.create_reference(display_mode=_display_mode(args), output="offline")
    _print_fretboard(reference)
    return 0


def cmd_keyboard(args: argparse.Namespace, factory: ComponentFactory) -> int:
    reference = factory.create_reference(display_mode=_display_mode(args), output="offline")
    _print_keyboard(reference)
    return 0


def cmd_play(args: argparse.Namespace, factory: ComponentFactory) -> int:
    pitch = parse_note(args.note)
    engine = factory.create_voice_engine(device_id=args.device)
    reference = factory.create_reference(engine=engine)
    try:
        selection = reference.select_note(pitch.pitch_class, pitch.octave, args.timbre)
        _print_selection(selection)
        if selection.error is not None:
            return 1
        settings = engine.settings
        time.sleep(settings.duration + settings.cleanup_delay)
    finally:
        reference.close()
    return 0


def cmd_render(args: argparse.Namespace, factory: ComponentFactory) -> int:
    # Deferred: pulls in soundfile
    from ..audio.rendering import render_note_to_wav

    pitch = parse_note(args.note)
    path = render_note_to_wav(
        args.output,
        pitch.pitch_class,
        pitch.octave,
        args.timbre,
        settings=factory.config_manager.synth_settings(),
        sample_rate=args.sample_rate,
        pitch_table=factory.create_pitch_table(),
        seed=args.seed,
    )
    print(f"Wrote {pitch} to {path}")
    return 0


def cmd_interactive(args: argparse.Namespace, factory: ComponentFactory) -> int:
    engine = factory.create_voice_engine(device_id=args.device)
    reference = factory.create_reference(engine=engine, display_mode=_display_mode(args))
    reference.events.on_selection_cleared(lambda title, text: print(f"{title}\n  {text}"))
    reference.events.on_display_mode_changed(lambda mode: print(f"Display: {mode}"))

    print(INTERACTIVE_HELP)
    try:
        for line in sys.stdin:
            words = line.split()
            if not words:
                continue
            command = words[0].lower()
            if command in ("quit", "exit", "q"):
                break
            elif command == "help":
                print(INTERACTIVE_HELP)
            elif command == "clear":
                reference.clear_selection()
            elif command == "flats":
                reference.toggle_flats()
            elif command == "octaves":
                reference.toggle_octave_numbers()
            elif command == "fretboard":
                _print_fretboard(reference)
            elif command == "keyboard":
                _print_keyboard(reference)
            else:
                try:
                    pitch = parse_note(words[0])
                    timbre = Timbre.parse(words[1]) if len(words) > 1 else Timbre.PRIMARY
                except ValueError as e:
                    print(e)
                    continue
                _print_selection(reference.select_note(pitch.pitch_class, pitch.octave, timbre))
    except KeyboardInterrupt:
        print()
    finally:
        reference.close()
    return 0


def cmd_devices(args: argparse.Namespace, factory: ComponentFactory) -> int:
    try:
        from ..audio.audio_output import default_output_device, list_output_devices
    except OSError as e:
        raise AudioDeviceError(f"Audio output unavailable: {e}") from e

    print("Available audio output devices:")
    print("-" * 70)
    for device in list_output_devices():
        print(f"Device {device['id']}: {device['name']}")
        print(f"  Max output channels: {device['channels']}")
        print(f"  Default sample rate: {device['default_samplerate']} Hz")
    print(f"Default output device: {default_output_device()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fret Atlas - piano and guitar note reference"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir", default=None, help="Directory with synth/audio_output/instrument JSON files"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Shared option groups
    display = argparse.ArgumentParser(add_help=False)
    display.add_argument("--flats", action="store_true", help="Spell accidentals as flats")
    display.add_argument("--octaves", action="store_true", help="Show octave numbers")

    timbre = argparse.ArgumentParser(add_help=False)
    timbre.add_argument(
        "--timbre",
        default=Timbre.PRIMARY.value,
        choices=[t.value for t in Timbre],
        help="Instrument surface, only changes stereo placement (default: piano)",
    )

    device = argparse.ArgumentParser(add_help=False)
    device.add_argument("--device", type=int, default=None, help="Audio output device ID")

    p = subparsers.add_parser("frequency", help="Show the frequency of a note")
    p.add_argument("note", help="Note with octave, e.g. A4 or Db3")
    p.set_defaults(handler=cmd_frequency)

    p = subparsers.add_parser("positions", help="List every fretboard position of a note")
    p.add_argument("note", help="Note with octave, e.g. E4")
    p.set_defaults(handler=cmd_positions)

    p = subparsers.add_parser("fretboard", parents=[display], help="Print the fretboard")
    p.set_defaults(handler=cmd_fretboard)

    p = subparsers.add_parser("keyboard", parents=[display], help="Print the keyboard range")
    p.set_defaults(handler=cmd_keyboard)

    p = subparsers.add_parser("play", parents=[timbre, device], help="Play a note")
    p.add_argument("note", help="Note with octave, e.g. A4")
    p.set_defaults(handler=cmd_play)

    p = subparsers.add_parser("render", parents=[timbre], help="Render a note to a WAV file")
    p.add_argument("note", help="Note with octave, e.g. A4")
    p.add_argument("output", help="Output WAV path")
    p.add_argument("--sample-rate", type=int, default=44100, help="Sample rate in Hz (default: 44100)")
    p.add_argument("--seed", type=int, default=None, help="Seed for the detune, for repeatable output")
    p.set_defaults(handler=cmd_render)

    p = subparsers.add_parser(
        "interactive", parents=[display, device], help="Play notes typed on stdin"
    )
    p.set_defaults(handler=cmd_interactive)

    p = subparsers.add_parser("devices", help="List audio output devices")
    p.set_defaults(handler=cmd_devices)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    setup_logging(level="DEBUG" if parsed_args.debug else "WARNING")
    factory = ComponentFactory(ConfigManager(parsed_args.config_dir))

    try:
        return parsed_args.handler(parsed_args, factory)
    except AudioDeviceError as e:
        logger.error(f"Audio device error: {e}")
        print(f"Audio device error: {e}", file=sys.stderr)
        return 2
    except (FretAtlasError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
