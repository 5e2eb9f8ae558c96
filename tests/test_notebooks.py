"""Tests for notebook posts."""

import base64
from datetime import date

import nbformat
import pytest
from nbformat.v4 import new_code_cell, new_markdown_cell, new_notebook, new_output

from sitebuilder.errors import ContentError
from sitebuilder.notebooks import (
    extract_markdown_attachments,
    filter_and_apply_visibility,
    first_heading,
    read_notebook,
)
from sitebuilder.store import ContentStore


def _write_nb(path, nb):
    path.parent.mkdir(parents=True, exist_ok=True)
    nbformat.write(nb, str(path))
    return path


class TestVisibility:
    def test_remove_cell_tag(self):
        nb = new_notebook(
            cells=[
                new_markdown_cell("keep"),
                new_markdown_cell("drop", metadata={"tags": ["remove-cell"]}),
            ]
        )
        filter_and_apply_visibility(nb)
        assert [c.source for c in nb.cells] == ["keep"]

    def test_hide_input_keeps_outputs(self):
        cell = new_code_cell(
            "print('hi')",
            metadata={"tags": ["hide-input"]},
            outputs=[new_output("stream", name="stdout", text="hi\n")],
        )
        nb = new_notebook(cells=[cell])
        filter_and_apply_visibility(nb)
        assert nb.cells[0].source == ""
        assert len(nb.cells[0].outputs) == 1

    def test_hide_output(self):
        cell = new_code_cell(
            "x = 1",
            metadata={"jupyter": {"outputs_hidden": True}},
            outputs=[new_output("stream", name="stdout", text="1\n")],
            execution_count=3,
        )
        nb = new_notebook(cells=[cell])
        filter_and_apply_visibility(nb)
        assert nb.cells[0].outputs == []
        assert nb.cells[0].execution_count is None

    def test_hidden_markdown_and_empty_cells_dropped(self):
        nb = new_notebook(
            cells=[
                new_markdown_cell("secret", metadata={"jupyter": {"source_hidden": True}}),
                new_markdown_cell("   "),
                new_code_cell(""),
                new_code_cell("y = 2"),
            ]
        )
        filter_and_apply_visibility(nb)
        assert [c.source for c in nb.cells] == ["y = 2"]


class TestAttachments:
    def test_attachment_extracted(self, static_out):
        payload = base64.b64encode(b"png-data").decode("ascii")
        cell = new_markdown_cell(
            "![plot](attachment:plot.png)",
            attachments={"plot.png": {"image/png": payload}},
        )
        text = extract_markdown_attachments(cell, static_out)

        assert text.startswith("![plot](/static/att-plot-")
        fname = text[len("![plot](/static/"):-1]
        assert (static_out / fname).read_bytes() == b"png-data"

    def test_unknown_attachment_untouched(self, static_out):
        cell = new_markdown_cell("![x](attachment:missing.png)")
        assert extract_markdown_attachments(cell, static_out) == "![x](attachment:missing.png)"


class TestReadNotebook:
    def test_title_from_metadata(self, tmp_path, static_out):
        nb = new_notebook(cells=[new_markdown_cell("# Heading\n\nSome prose.")])
        nb.metadata["title"] = "From metadata"
        nb.metadata["date"] = "2021-02-03"
        fm, body = read_notebook(_write_nb(tmp_path / "a.ipynb", nb), static_out)
        assert fm["title"] == "From metadata"
        assert fm["date"] == "2021-02-03"
        assert "Some prose." in body

    def test_title_from_first_heading(self, tmp_path, static_out):
        nb = new_notebook(
            cells=[
                new_markdown_cell("Intro text."),
                new_markdown_cell("# The Real Title\n\nMore."),
            ]
        )
        assert first_heading(nb) == "The Real Title"
        fm, _ = read_notebook(_write_nb(tmp_path / "a.ipynb", nb), static_out)
        assert fm["title"] == "The Real Title"

    def test_removed_cells_not_rendered(self, tmp_path, static_out):
        nb = new_notebook(
            cells=[
                new_markdown_cell("Visible paragraph."),
                new_markdown_cell("Hidden paragraph.", metadata={"tags": ["remove-cell"]}),
            ]
        )
        _, body = read_notebook(_write_nb(tmp_path / "a.ipynb", nb), static_out)
        assert "Visible paragraph." in body
        assert "Hidden paragraph." not in body

    def test_invalid_notebook(self, tmp_path, static_out):
        path = tmp_path / "broken.ipynb"
        path.write_text("this is not json", encoding="utf-8")
        with pytest.raises(ContentError):
            read_notebook(path, static_out)


class TestNotebookEntries:
    def test_notebook_becomes_blog_entry(self, content_dir, static_out):
        nb = new_notebook(cells=[new_markdown_cell("# Exploring data\n\nCharts.")])
        nb.metadata["date"] = "2022-07-01"
        nb.metadata["excerpt"] = "A look at some data."
        _write_nb(content_dir / "blog" / "exploring.ipynb", nb)

        store = ContentStore.load(content_dir, static_out)
        entry = store.get_by_slug("/blog/exploring/")
        assert entry.title == "Exploring data"
        assert entry.date == date(2022, 7, 1)
        assert entry.excerpt == "A look at some data."
        assert "Charts." in entry.body_html

    def test_checkpoints_ignored(self, content_dir, static_out):
        nb = new_notebook(cells=[new_markdown_cell("x")])
        _write_nb(content_dir / "blog" / ".ipynb_checkpoints" / "a-checkpoint.ipynb", nb)
        assert len(ContentStore.load(content_dir, static_out)) == 0
