"""
Tests for RepairPipeline - end-to-end runs with fake oracles.

Covers the documented repair scenarios, idempotence on a clean page,
file backup behaviour, pass isolation and pre-emption.
"""

from typing import Tuple

import pytest

from p5_repair.repair import RepairPipeline, create_default_pipeline
from p5_repair.repair.contracts.events import ErrorEvent, EventType
from p5_repair.repair.passes import ParenthesisPass, RepairPass, ShaderPass

from conftest import (
    CLEAN_PAGE,
    FakePageExecutor,
    FakeSuggestionOracle,
    console_error,
    make_page,
)


class ExplodingPass(RepairPass):
    """Pass that always raises."""

    name = "exploding"

    async def repair(self, html: str) -> Tuple[str, int]:
        raise RuntimeError("boom")


def _pipeline(sink, oracle=None, executor=None, passes=None) -> RepairPipeline:
    return RepairPipeline(
        passes=passes,
        oracle=oracle or FakeSuggestionOracle(),
        executor=executor or FakePageExecutor(),
        sink=sink,
    )


class TestDefaultPipeline:
    """Tests for pass ordering."""

    def test_pass_order(self):
        """Test the standard pass order."""
        pipeline = create_default_pipeline(oracle=FakeSuggestionOracle(), executor=FakePageExecutor())

        assert [p.name for p in pipeline.passes] == [
            "markup",
            "style-tags",
            "cdn",
            "not-a-function",
            "css",
            "undefined-variables",
            "parentheses",
            "shader",
        ]


class TestCleanDocument:
    """Tests for a page with nothing to repair."""

    @pytest.mark.asyncio
    async def test_run_is_a_no_op(self, sink):
        """Test a clean page yields zero fixes and identical text."""
        report = await _pipeline(sink).run(CLEAN_PAGE)

        assert report.total_fixes == 0
        assert report.html == CLEAN_PAGE
        assert report.describe() == "No issues found"
        assert sink.events("run_summary")[0]["total_fixes"] == 0

    @pytest.mark.asyncio
    async def test_process_file_writes_backup_only(self, sink, tmp_path):
        """Test the backup is written and the file is left byte-identical."""
        path = tmp_path / "sketch.html"
        path.write_text(CLEAN_PAGE, encoding="utf-8")

        report = await _pipeline(sink).process_file(path)

        assert report.total_fixes == 0
        assert path.read_text(encoding="utf-8") == CLEAN_PAGE
        assert (tmp_path / "sketch.html.backup").read_text(encoding="utf-8") == CLEAN_PAGE

    @pytest.mark.asyncio
    async def test_missing_file(self, sink, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            await _pipeline(sink).process_file(tmp_path / "missing.html")


class TestScenarios:
    """End-to-end repairs with the oracle unavailable unless stated."""

    @pytest.mark.asyncio
    async def test_missing_paren_fixed_in_file(self, sink, tmp_path):
        """Test the dropped paren is fixed on disk and the backup keeps the original."""
        original = make_page(script="createFish(p.random(3);")
        path = tmp_path / "sketch.html"
        path.write_text(original, encoding="utf-8")

        report = await _pipeline(sink).process_file(path)

        assert report.total_fixes == 1
        assert report.fixes_for("parentheses") == 1
        assert "createFish(p.random(3));" in path.read_text(encoding="utf-8")
        assert (tmp_path / "sketch.html.backup").read_text(encoding="utf-8") == original

    @pytest.mark.asyncio
    async def test_nameless_css_property(self, sink):
        """Test the CSS fallback supplies a property name."""
        html = make_page(script="let a = 1;", style="\nbody {\n  : red;\n}\n")

        report = await _pipeline(sink).run(html)

        assert report.total_fixes == 1
        assert report.fixes_for("css") == 1
        assert "position: red;" in report.html

    @pytest.mark.asyncio
    async def test_undefined_variable_declared(self, sink):
        """Test a global default declaration is added."""
        html = make_page(script="function draw() {\n  fish.uniforms.value.x = mouseX;\n}")
        executor = FakePageExecutor([console_error("Uncaught ReferenceError: fish is not defined")])

        report = await _pipeline(sink, executor=executor).run(html)

        assert report.total_fixes == 1
        assert report.fixes_for("undefined-variables") == 1
        assert "let fish = { uniforms: { value: { x: 0, y: 0 } } };" in report.html

    @pytest.mark.asyncio
    async def test_prose_answer_falls_back(self, sink):
        """Test an unusable suggestion still yields the deterministic fix."""
        oracle = FakeSuggestionOracle(["I'm not able to help with that request."])
        html = make_page(script="createFish(p.random(3);")

        report = await _pipeline(sink, oracle=oracle).run(html)

        assert report.total_fixes == 1
        assert "createFish(p.random(3));" in report.html


class TestPassIsolation:
    """Tests for failure handling and pre-emption."""

    @pytest.mark.asyncio
    async def test_failing_pass_does_not_stop_run(self, sink):
        """Test a raising pass counts zero and later passes still run."""
        html = make_page(script="createFish(p.random(3);")
        pipeline = _pipeline(sink, passes=[ExplodingPass(), ParenthesisPass()])

        report = await pipeline.run(html)

        assert report.errors == ["exploding: boom"]
        assert report.fixes_for("exploding") == 0
        assert report.fixes_for("parentheses") == 1
        failed = [r for r in sink.events("pass_completed") if r.get("error")]
        assert failed[0]["pass"] == "exploding"

    @pytest.mark.asyncio
    async def test_shader_fix_preempts_later_passes(self, sink):
        """Test passes after a successful shader rewrite are skipped."""
        block = "new THREE.ShaderMaterial({\n  vertexShader: vs,\n  fragmentShader: fs\n});"
        fixed_block = block.replace("fs\n", "fixedFs\n")
        html = make_page(script=f"const mat = {block}").replace(
            "</body>", "<script>\ncreateFish(p.random(3);\n</script>\n</body>"
        )
        oracle = FakeSuggestionOracle([f"```js\n{fixed_block}\n```"])
        executor = FakePageExecutor([
            ErrorEvent(type=EventType.CONSOLE_ERROR, message="THREE.WebGLProgram: Shader Error 0"),
        ])
        paren_pass = ParenthesisPass()
        pipeline = _pipeline(sink, oracle=oracle, executor=executor, passes=[ShaderPass(), paren_pass])

        report = await pipeline.run(html)

        assert report.preempted_by == "shader"
        assert report.total_fixes == 1
        assert fixed_block in report.html
        assert "createFish(p.random(3);" in report.html
        assert report.passes[1].skipped

    @pytest.mark.asyncio
    async def test_passes_see_previous_output(self, sink):
        """Test each pass reads the text the previous one produced."""
        html = make_page(
            script="createFish(p.random(3);",
            head="&lt;meta charset=\"utf-8\"&gt;\n",
        )

        report = await _pipeline(sink).run(html)

        assert report.per_pass["markup"] == 1
        assert report.per_pass["parentheses"] == 1
        assert '<meta charset="utf-8">' in report.html
        assert "createFish(p.random(3));" in report.html
        assert report.describe() == "Fixed 2 issues (1 markup, 1 parentheses)"
