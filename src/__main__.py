#!/usr/bin/env python3
"""
aqaprez - Plain-text slide deck parser

Reads a deck written in the aqaprez markup, parses it into slides and writes
a JSON rendition of the deck for a display layer to pick up.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Markup at a glance:
    # Header (up to #####)
    - bullet / 1. numbered item
    ```rust            (optionally preceded by '| font_size: 30' lines)
    ![alt](image.png){ scale: 50%; }
    // speaker comment, never displayed
    ---![](background.png)    (slide divider, optional background)

Usage:
    aqaprez inputdir/ outputdir/ --inputFile talk.prez

Examples:
    # Parse and export once
    aqaprez . output/ --inputFile talk.prez

    # Keep running, re-export whenever the deck file changes
    aqaprez . output/ --inputFile talk.prez --watch

    # Verbose output
    aqaprez . output/ --inputFile talk.prez -vv
"""

import json
import sys
import time
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import (
    __version__,
    LOG,
    state_connectToLogger,
    presentation_load,
    images_resolve,
    presentation_loadResolved,
    deck_toDict,
    PresentationSlot,
    FileWatch,
)
from .config import appsettings
from .models import Presentation, ProgramState, pipeline


DISPLAY_TITLE = r"""

   __ _  __ _  __ _ _ __  _ __ ___ ____
  / _` |/ _` |/ _` | '_ \| '__/ _ \_  /
 | (_| | (_| | (_| | |_) | | |  __// /
  \__,_|\__, |\__,_| .__/|_|  \___/___|
           |_|     |_|

  Plain-text slide decks
"""

# Define CLI arguments
parser = ArgumentParser(
    description="aqaprez - parse plain-text slide decks",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input deck file (relative to inputdir)"
)

parser.add_argument(
    "--title",
    default=None,
    type=str,
    help="Presentation title. Defaults to the input file name",
)

parser.add_argument(
    "--watch",
    action="store_true",
    help="Keep running and re-export the deck whenever the input file changes",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the deck file
            - deckOutputdir: Created output directory path
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile

    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.deckOutputdir = state.outputdir
    state.deckOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.deckOutputdir}", level=2)

    state.envOK = True
    return state


def source_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read and parse the deck file into a Presentation.

    Returns:
        ProgramState with added field:
            - presentation: the parsed Presentation

    Exits:
        1 if the file cannot be read or does not parse
    """

    state = inputstate.copy()

    LOG("Parsing deck...", level=1)
    try:
        state.presentation = presentation_load(
            state.inputSourceFile, title=state.title, debug=(state.verbosity >= 3)
        )
    except OSError as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)
    except SyntaxError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Parsed {len(state.presentation.slides)} slides", level=2)
    return state


def images_attach(inputstate: ProgramState) -> ProgramState:
    """
    Resolve image paths of the parsed deck against the input directory.

    Missing images are warned about, never fatal.

    Returns:
        ProgramState with added field:
            - imagesResolved: number of images found on disk
    """

    state = inputstate.copy()
    state.imagesResolved = images_resolve(state.presentation, state.inputSourceFile.parent)
    return state


def deck_write(presentation: Presentation, outputdir: Path) -> Path:
    """Write the JSON rendition of a presentation and return its path"""
    output_file = outputdir / appsettings.export_filename
    output_file.write_text(
        json.dumps(deck_toDict(presentation), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    LOG(f"Wrote {output_file}", level=2)
    return output_file


def deck_export(inputstate: ProgramState) -> ProgramState:
    """
    Write the parsed deck as JSON to the output directory.

    Returns:
        ProgramState with added field:
            - exportFile: path of the written file
    """

    state = inputstate.copy()
    state.exportFile = deck_write(state.presentation, state.deckOutputdir)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display results to user.

    Exits:
        1 if nothing was exported
    """
    state: ProgramState = inputstate.copy()
    if not state.exportFile:
        print("Error: Export failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Deck parsed", level=1)
    LOG(f"  Title:  {state.presentation.title}", level=1)
    LOG(f"  Slides: {len(state.presentation.slides)}", level=1)
    LOG(f"  Images: {state.imagesResolved} found", level=1)
    LOG(f"  Output: {state.exportFile}", level=1)
    return state


def watch_run(inputstate: ProgramState) -> ProgramState:
    """
    Re-export the deck on every change of the input file (--watch only).

    A deck that fails to parse is logged and the last good export stays in
    place. Runs until interrupted.
    """
    state: ProgramState = inputstate.copy()
    if not state.watch:
        return state

    slot = PresentationSlot(state.inputSourceFile, title=state.title, loader=presentation_loadResolved)
    watch = FileWatch(state.inputSourceFile)

    def reexport() -> None:
        if slot.reload() and slot.current is not None:
            deck_write(slot.current, state.deckOutputdir)

    watch.subscribe(reexport)
    watch.start()
    LOG(f"Watching {state.inputSourceFile} (Ctrl-C to stop)", level=1)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        LOG("Stopping file watcher", level=1)
    finally:
        watch.stop()
    return state


@chris_plugin(
    parser=parser,
    title="aqaprez - plain-text slide deck parser",
    category="Visualization",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - parse a deck and export it as JSON.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. source_parse: Read and parse the deck
        3. images_attach: Resolve image files
        4. deck_export: Write deck.json
        5. results_report: Display results to user
        6. watch_run: With --watch, re-export on every change

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_parse, images_attach, deck_export, results_report, watch_run)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
