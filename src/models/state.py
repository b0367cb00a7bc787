"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from .deck import Presentation


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as processing progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, title, watch
        - env_check: inputSourceFile, deckOutputdir, envOK
        - source_parse: presentation
        - images_attach: imagesResolved
        - deck_export: exportFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the deck file
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Deck filename (relative to inputdir)
        title: Optional presentation title (defaults to the file name)
        watch: Keep running and re-export on every file change
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the deck file
        deckOutputdir: Directory the exported deck is written to
        presentation: Parsed Presentation
        imagesResolved: Number of images that received a handle
        exportFile: Path of the written deck.json
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    title: Optional[str] = field(default=None)
    watch: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    deckOutputdir: Path = field(default=Path("/"))
    presentation: Optional["Presentation"] = field(default=None)
    imagesResolved: int = field(default=0)
    exportFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, title, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Drop options ProgramState has no field for
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            source_parse,
            images_attach,
            deck_export,
            results_report
        )

    This is equivalent to:
        results_report(deck_export(images_attach(source_parse(env_check(initial_state)))))

    But reads left-to-right instead of inside-out.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
