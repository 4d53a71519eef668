"""End-to-end tests for the suggestion facade."""

import tempfile
from pathlib import Path

import pytest

from mentionlink.engine.buffer import EditorPosition, TextBuffer
from mentionlink.engine.config import LinkingSettings, ScopeRule
from mentionlink.engine.ranker import RankedCandidate
from mentionlink.engine.candidates import Candidate
from mentionlink.engine.suggest import MentionSuggest
from mentionlink.engine.vault import FolderVault


def write_note(root: Path, path: str, text: str = "") -> None:
    file_path = root / path
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(text, encoding="utf-8")


@pytest.fixture
def temp_vault():
    """Create a temporary vault for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir) / "test_vault"
        write_note(vault_path, "People/Alice.md")
        write_note(vault_path, "People/Bob.md", "---\nalias: Bobby\n---\n")
        write_note(vault_path, "Tags/project.md")
        write_note(vault_path, "inbox.md")
        yield vault_path


class Editor:
    """Types into a buffer and reports every keystroke to the facade."""

    def __init__(self, suggest: MentionSuggest, settings: LinkingSettings = None):
        self.suggest = suggest
        self.settings = settings
        self.buffer = TextBuffer()
        self.cursor = EditorPosition(0, 0)
        self.window = None

    def type(self, text: str):
        for char in text:
            self.cursor = self.buffer.insert(char, self.cursor)
            self.window = self.suggest.on_trigger(self.cursor, self.buffer, self.settings)
        return self.window


def titles(suggest, ranked):
    return [suggest.render_candidate(r).title for r in ranked]


class TestOnTrigger:
    def test_symbol_lists_every_note(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        window = Editor(suggest).type("Hello @")

        assert window is not None
        assert window.query == ""
        assert window.start == EditorPosition(0, 6)

        ranked = suggest.get_candidates()
        assert titles(suggest, ranked) == ["inbox", "project", "Bob", "Bobby", "Alice"]
        assert not any(r.candidate.is_create_new for r in ranked)

    def test_query_filters(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        Editor(suggest).type("Hi @ali")

        ranked = suggest.get_candidates()
        assert [r.candidate.target_path for r in ranked] == ["People/Alice.md"]

    def test_no_window_in_fenced_code(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))

        assert Editor(suggest).type("```\n@") is None
        assert suggest.context is None
        assert suggest.get_candidates() == []

    def test_space_budget(self, temp_vault):
        settings = LinkingSettings(leave_popup_open_for_x_spaces=1)
        suggest = MentionSuggest(FolderVault(temp_vault), settings)
        editor = Editor(suggest)

        assert editor.type("@Bob Sm").query == "Bob Sm"
        assert editor.type(" ") is None
        assert not suggest.is_open

    def test_settings_snapshot_per_call(self, temp_vault):
        """Settings passed to on_trigger win over the ones given at construction."""
        suggest = MentionSuggest(FolderVault(temp_vault), LinkingSettings())
        scoped = LinkingSettings(scope_rules=[ScopeRule(folder="Tags", symbol="#")])

        assert Editor(suggest).type("@") is not None
        assert Editor(suggest, scoped).type("#pro") is not None
        assert [r.candidate.target_path for r in suggest.get_candidates()] == ["Tags/project.md"]


class TestScoping:
    def test_each_symbol_sees_its_folder(self, temp_vault):
        settings = LinkingSettings(scope_rules=[
            ScopeRule(folder="People", symbol="@"),
            ScopeRule(folder="Tags", symbol="#"),
        ])
        suggest = MentionSuggest(FolderVault(temp_vault), settings)

        Editor(suggest).type("see #")
        assert suggest.context.symbol == "#"
        assert {r.candidate.target_path for r in suggest.get_candidates()} == {"Tags/project.md"}

        Editor(suggest).type("see @")
        assert suggest.context.symbol == "@"
        assert {r.candidate.target_path for r in suggest.get_candidates()} == {
            "People/Alice.md", "People/Bob.md",
        }

    def test_scoped_query_is_ranked(self, temp_vault):
        settings = LinkingSettings(scope_rules=[
            ScopeRule(folder="People", symbol="@"),
            ScopeRule(folder="Tags", symbol="#"),
        ])
        suggest = MentionSuggest(FolderVault(temp_vault), settings)

        Editor(suggest).type("see #proj")
        ranked = suggest.get_candidates()
        assert [r.candidate.target_path for r in ranked] == ["Tags/project.md"]
        assert ranked[0].score > 0
        assert suggest.render_candidate(ranked[0]).highlights == (0, 1, 2, 3)

        Editor(suggest).type("see #zzz")
        assert suggest.context.query == "zzz"
        assert suggest.get_candidates() == []


class TestRenderCandidate:
    def test_matched_alias_highlighted(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        Editor(suggest).type("@bob")

        ranked = suggest.get_candidates()
        aliased = next(r for r in ranked if r.candidate.alias == "Bobby")
        fragment = suggest.render_candidate(aliased)

        assert fragment.title == "Bobby"
        assert fragment.highlights == (0, 1, 2)
        assert fragment.path == "People/Bob"
        assert fragment.has_alias
        assert not fragment.is_create_new

    def test_unmatched_alias_still_shown(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        candidate = Candidate(display_name="Robert", target_path="People/Robert.md", alias="Bobby")

        fragment = suggest.render_candidate(RankedCandidate(candidate=candidate))

        assert fragment.title == "Bobby"
        assert fragment.highlights == ()

    def test_create_new_row(self, temp_vault):
        settings = LinkingSettings(show_add_new_note=True, add_new_note_directory="People")
        suggest = MentionSuggest(FolderVault(temp_vault), settings)
        Editor(suggest).type("@Brandon")

        last = suggest.get_candidates()[-1]
        fragment = suggest.render_candidate(last)

        assert last.candidate.is_create_new
        assert last.candidate.target_path == "People/Brandon.md"
        assert fragment.is_create_new
        assert not fragment.has_alias
        assert fragment.path == "People/Brandon"


class TestCommit:
    @pytest.mark.asyncio
    async def test_commit_alias(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        editor = Editor(suggest)
        editor.type("Hi @bob")

        aliased = next(r for r in suggest.get_candidates() if r.candidate.alias == "Bobby")
        link = await suggest.commit(aliased)

        assert link == "[[Bob|@Bobby]]"
        assert editor.buffer.text == "Hi [[Bob|@Bobby]]"
        assert not suggest.is_open
        assert suggest.context is None

    @pytest.mark.asyncio
    async def test_label_round_trip(self, temp_vault):
        """Committing A for "@A" writes the symbol back into the label."""
        write_note(temp_vault, "A.md")
        suggest = MentionSuggest(FolderVault(temp_vault))
        editor = Editor(suggest)
        editor.type("@A")

        chosen = next(r for r in suggest.get_candidates() if r.candidate.display_name == "A")
        await suggest.commit(chosen)

        assert editor.buffer.text == "[[A|@A]]"

    @pytest.mark.asyncio
    async def test_commit_create_new(self, temp_vault):
        settings = LinkingSettings(show_add_new_note=True, add_new_note_directory="People")
        suggest = MentionSuggest(FolderVault(temp_vault), settings)
        editor = Editor(suggest)
        editor.type("Met @Brandon")

        link = await suggest.commit(suggest.get_candidates()[-1])

        assert (temp_vault / "People" / "Brandon.md").exists()
        assert link == "[[Brandon|@Brandon]]"
        assert editor.buffer.text == "Met [[Brandon|@Brandon]]"

    @pytest.mark.asyncio
    async def test_commit_without_session(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        candidate = Candidate(display_name="Bob", target_path="People/Bob.md")

        with pytest.raises(RuntimeError):
            await suggest.commit(RankedCandidate(candidate=candidate))

    def test_close(self, temp_vault):
        suggest = MentionSuggest(FolderVault(temp_vault))
        Editor(suggest).type("@b")
        assert suggest.is_open

        suggest.close()
        suggest.close()

        assert not suggest.is_open
        assert suggest.get_candidates() == []
