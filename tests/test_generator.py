"""Tests for skeleton rendering and the create workflow."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from agent_discover.core.analyser import DomainAnalyser
from agent_discover.core.documents import DocumentType, parse_text, split_front_matter
from agent_discover.core.generator import TemplateGenerator
from agent_discover.core.retriever import SearchHit
from agent_discover.core.templates import SHAPES, apply_to, render, title_case

RELATED = [
    SearchHit(
        name="backend-architect",
        doc_type="agent",
        description="Designs scalable backend APIs",
        path="agents/backend-architect.agent.md",
        score=0.66,
        subjects=["api", "postgresql"],
        tools=["codebase", "terminal"],
        snippet="REST and GraphQL API design with versioning and pagination",
    ),
]


@pytest.fixture
def generator():
    retriever = MagicMock()
    retriever.search.return_value = list(RELATED)
    return TemplateGenerator(DomainAnalyser(retriever))


def _front(text: str) -> dict:
    front, _ = split_front_matter(text)
    return yaml.safe_load(front)


class TestRender:
    @pytest.mark.parametrize("doc_type", [t.value for t in DocumentType])
    def test_shape_per_type(self, generator, doc_type):
        analysis = generator.analyse("python api design", doc_type)
        text = render(analysis)
        doc = parse_text(text, Path(analysis.filename))
        assert doc.doc_type.value == doc_type
        assert "# Python Api Design" in text
        for section in SHAPES[DocumentType(doc_type)].sections:
            assert f"## {section}" in text
        assert "TODO" not in text

    def test_agent_front_matter(self, generator):
        meta = _front(render(generator.analyse("api design", "agent")))
        assert meta["name"] == "api-design"
        assert meta["description"] == "Api Design specialist agent"
        assert meta["tools"] == ["codebase", "terminal"]
        assert meta["subjects"] == ["postgresql"]

    def test_instruction_front_matter(self, generator):
        meta = _front(render(generator.analyse("python testing", "instruction")))
        assert meta["applyTo"] == "**/*.py"
        assert "tools" not in meta
        assert "name" not in meta

    def test_prompt_front_matter(self, generator):
        meta = _front(render(generator.analyse("release notes", "prompt")))
        assert meta["mode"] == "agent"
        assert "name" not in meta

    def test_related_agents_listed(self, generator):
        text = render(generator.analyse("api design", "agent"))
        assert "- backend-architect" in text

    def test_apply_to_fallback(self, generator):
        assert apply_to(generator.analyse("release notes", "instruction")) == "**"
        assert apply_to(generator.analyse("React/TypeScript", "instruction")) == "**/*.tsx,**/*.jsx"

    def test_title_case_keeps_acronyms(self):
        assert title_case("REST api design") == "REST Api Design"


class TestPrompt:
    def test_prompt_quotes_related(self, generator):
        analysis = generator.analyse("api design", "agent")
        prompt = generator.build_prompt(analysis)
        assert "new agent document" in prompt
        assert "`api-design.agent.md`" in prompt
        assert "### backend-architect (agent, 66% match)" in prompt
        assert "graphql" in prompt
        assert "`codebase`" in prompt

    def test_prompt_without_related(self):
        retriever = MagicMock()
        retriever.search.return_value = []
        generator = TemplateGenerator(DomainAnalyser(retriever))
        prompt = generator.build_prompt(generator.analyse("quantum chemistry"))
        assert "(the corpus has no related documents yet)" in prompt


class TestCreate:
    def test_writes_file(self, generator, tmp_path):
        out = tmp_path / "new" / "dir"
        target, analysis = generator.create("api design", output_dir=out)
        assert target == out / "api-design.agent.md"
        assert target.read_text(encoding="utf-8") == render(analysis)

    def test_refuses_overwrite(self, generator, tmp_path):
        generator.create("api design", output_dir=tmp_path)
        with pytest.raises(FileExistsError, match="--force"):
            generator.create("api design", output_dir=tmp_path)

    def test_force_overwrites(self, generator, tmp_path):
        target = tmp_path / "api-design.agent.md"
        target.write_text("old", encoding="utf-8")
        generator.create("api design", output_dir=tmp_path, force=True)
        assert target.read_text(encoding="utf-8").startswith("---\n")
