# tests/test_grammar.py

from __future__ import annotations

import pytest

from pipewright.errors import CompileError
from pipewright.pipeline.grammar import generate_parser, generated_parser_path

from .fakes import FakeAlerter, FakeGrammarCompiler


def test_parser_lives_beside_the_grammar(settings) -> None:
    out = generated_parser_path(settings)
    assert out.parent == settings.grammar_path.parent
    assert out.name == "grammar-parser.js"


@pytest.mark.asyncio
async def test_generate_parser_writes_module(settings) -> None:
    compiler = FakeGrammarCompiler(source="module.exports = 42;\n")
    alerter = FakeAlerter()

    out = await generate_parser(settings, compiler, alerter)

    assert out.read_text("utf-8") == "module.exports = 42;\n"
    assert compiler.calls == [settings.grammar_path]
    assert alerter.alerts == []
    # No temp files left behind.
    assert sorted(p.name for p in out.parent.iterdir()) == ["grammar-parser.jison", "grammar-parser.js"]


@pytest.mark.asyncio
async def test_compile_error_keeps_previous_parser(settings) -> None:
    out = generated_parser_path(settings)
    out.write_text("// previous parser\n", "utf-8")
    compiler = FakeGrammarCompiler(error="Parse error on line 2: unexpected ';'")
    alerter = FakeAlerter()

    with pytest.raises(CompileError) as excinfo:
        await generate_parser(settings, compiler, alerter)

    assert "line 2" in excinfo.value.diagnostic
    assert out.read_text("utf-8") == "// previous parser\n"
    assert alerter.alerts == ["grammar compile failed"]


@pytest.mark.asyncio
async def test_regenerating_overwrites(settings) -> None:
    await generate_parser(settings, FakeGrammarCompiler(source="one"), FakeAlerter())
    out = await generate_parser(settings, FakeGrammarCompiler(source="two"), FakeAlerter())

    assert out.read_text("utf-8") == "two"
