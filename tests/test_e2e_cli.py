"""
End-to-end pipeline tests

Tests the CLI stages: deck file → parse → image resolution → deck.json
"""

import json
from argparse import Namespace

import pytest

from aqaprez.__main__ import (
    deck_export,
    env_check,
    images_attach,
    results_report,
    source_parse,
    watch_run,
)
from aqaprez.config import appsettings
from aqaprez.models import ProgramState, pipeline


DECK = """## Wprowadzenie do Rusta

Maciej

---![](bg.png)

# Rust

- Szybki przegląd składni
- Feature'y

---

## while loop

```rust
let mut a = 0;

while a < 10 {
    a += 1;
}
```

// pokazać też loop

"""


@pytest.fixture
def state(tmp_path):
    (tmp_path / "talk.prez").write_text(DECK, encoding="utf-8")
    (tmp_path / "bg.png").write_bytes(b"png")
    return ProgramState(
        inputdir=tmp_path,
        outputdir=tmp_path / "out",
        inputFile="talk.prez",
        verbosity=0,
    )


class TestPipeline:
    """Test the full export pipeline"""

    def test_export(self, state):
        """The exported deck mirrors the parsed slides"""
        final = pipeline(state, env_check, source_parse, images_attach, deck_export, results_report)

        assert final.envOK is True
        assert final.imagesResolved == 1
        assert final.exportFile == state.outputdir / "deck.json"

        deck = json.loads(final.exportFile.read_text(encoding="utf-8"))
        assert deck["title"] == "talk.prez"
        assert len(deck["slides"]) == 3
        assert deck["slides"][1]["background"]["path"] == "bg.png"
        assert deck["slides"][2]["nodes"][1]["language"] == "rust"
        assert deck["slides"][2]["nodes"][2] == {"kind": "comment", "text": "pokazać też loop"}

    def test_title_option(self, state):
        """--title overrides the file name"""
        state.title = "Rust intro"
        final = pipeline(state, env_check, source_parse)
        assert final.presentation.title == "Rust intro"

    def test_stages_do_not_mutate_input(self, state):
        """Each stage works on a copy"""
        env_check(state)
        assert state.envOK is False

    def test_watch_disabled_is_noop(self, state):
        """Without --watch the last stage returns at once"""
        final = pipeline(state, env_check, source_parse, watch_run)
        assert final.presentation is not None


class TestPipelineErrors:
    """Test stage failures"""

    def test_missing_input(self, state):
        """Missing deck file exits with status 1"""
        state.inputFile = "missing.prez"
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1

    def test_parse_error(self, state, monkeypatch):
        """A deck that does not parse exits with status 1"""
        (state.inputdir / "talk.prez").write_text("![](a.png){ scale: 0%; }\n\n", encoding="utf-8")
        monkeypatch.setattr(appsettings, "scale_policy", "reject")

        checked = env_check(state)
        with pytest.raises(SystemExit) as excinfo:
            source_parse(checked)
        assert excinfo.value.code == 1

    def test_invalid_utf8(self, state, capsys):
        """A deck that is not valid UTF-8 exits with status 1 and one error line"""
        (state.inputdir / "talk.prez").write_bytes(b"\xff")

        checked = env_check(state)
        with pytest.raises(SystemExit) as excinfo:
            source_parse(checked)
        assert excinfo.value.code == 1
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_report_without_export(self, state):
        """Reporting without an export is an error"""
        with pytest.raises(SystemExit):
            results_report(state)


class TestProgramState:
    """Test state creation from CLI options"""

    def test_from_namespace(self, tmp_path):
        """Known options are copied, unknown ones dropped"""
        options = Namespace(inputFile="a.prez", verbosity=2, watch=True, unrelated="x")
        state = ProgramState.state_createFromNamespace(options, inputdir=tmp_path, outputdir=tmp_path)

        assert state.inputFile == "a.prez"
        assert state.verbosity == 2
        assert state.watch is True
        assert not hasattr(state, "unrelated")
