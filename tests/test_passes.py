"""
Tests for the repair passes, one class per pass.

Every pass runs against FakeSuggestionOracle / FakePageExecutor, so no
browser or provider is needed. Each pass is checked with a usable
suggestion, with an unavailable oracle (mechanical fallback), and on a
document it has nothing to do for.
"""

import pytest

from p5_repair.core.config import settings
from p5_repair.repair.contracts.events import ErrorEvent, EventType
from p5_repair.repair.passes import (
    CdnPass,
    CssPass,
    MarkupPass,
    NotAFunctionPass,
    ParenthesisPass,
    ShaderPass,
    StyleTagPass,
    UndefinedVariablePass,
)
from p5_repair.repair.passes.not_a_function_pass import apply_block_patches
from p5_repair.repair.contracts.patches import BlockPatch

from conftest import (
    CLEAN_PAGE,
    FakePageExecutor,
    FakeSuggestionOracle,
    console_error,
    make_page,
    page_error,
)


# ---------------------------------------------------------------------------
# DOCUMENT PASSES
# ---------------------------------------------------------------------------

class TestMarkupPass:
    """Tests for the markup pass."""

    @pytest.mark.asyncio
    async def test_encoded_head_is_rewritten(self, sink):
        """Test encoded tags are restored and counted."""
        html = make_page(head='&lt;script src="https://cdn.example.com/p5.js"&gt;&lt;/script&gt;\n')

        result = await MarkupPass(sink=sink).run(html)

        assert result.fix_count == 1
        assert '<script src="https://cdn.example.com/p5.js"></script>' in result.html
        assert len(sink.events("fix_applied")) == 1

    @pytest.mark.asyncio
    async def test_clean_document(self, sink):
        """Test nothing changes on a clean page."""
        result = await MarkupPass(sink=sink).run(CLEAN_PAGE)

        assert result.fix_count == 0
        assert result.html == CLEAN_PAGE


class TestStyleTagPass:
    """Tests for the style-tag pass."""

    @pytest.mark.asyncio
    async def test_bare_css_is_wrapped(self, sink):
        """Test CSS after </title> is wrapped."""
        html = make_page(head="body { margin: 0; padding: 0; }\n")

        result = await StyleTagPass(sink=sink).run(html)

        assert result.fix_count == 1
        assert "<style>\nbody { margin: 0; padding: 0; }" in result.html


# ---------------------------------------------------------------------------
# CDN
# ---------------------------------------------------------------------------

BROKEN_TAG = '<script src="https://cdn.example.com/p@1.8.0/p5.js"></script>'
FIXED_TAG = '<script src="https://cdn.example.com/p5@1.8.0/p5.js"></script>'
CDN_PAGE = make_page(script="function setup() {}", head=BROKEN_TAG + "\n")
CDN_FAILURE = ErrorEvent(
    type=EventType.REQUEST_FAILED,
    message="net::ERR_ABORTED",
    url="https://cdn.example.com/p@1.8.0/p5.js",
)


class TestCdnPass:
    """Tests for the CDN pass."""

    @pytest.mark.asyncio
    async def test_failed_tag_is_replaced(self, sink):
        """Test the suggested tag replaces the failing one."""
        oracle = FakeSuggestionOracle([FIXED_TAG])
        executor = FakePageExecutor([CDN_FAILURE])

        result = await CdnPass(oracle=oracle, executor=executor, sink=sink).run(CDN_PAGE)

        assert result.fix_count == 1
        assert FIXED_TAG in result.html
        assert BROKEN_TAG not in result.html
        assert oracle.call_count == 1

    @pytest.mark.asyncio
    async def test_console_error_url_is_matched(self, sink):
        """Test a URL named in a console error is matched to its tag."""
        oracle = FakeSuggestionOracle([FIXED_TAG])
        executor = FakePageExecutor([
            console_error('Failed to load resource "https://cdn.example.com/p@1.8.0/p5.js"'),
        ])

        result = await CdnPass(oracle=oracle, executor=executor, sink=sink).run(CDN_PAGE)

        assert result.fix_count == 1

    @pytest.mark.asyncio
    async def test_unquoted_src_attribute(self, sink):
        """Test a tag whose src is unquoted and not the first attribute is still found."""
        broken = "<script defer src=https://cdn.example.com/three@0.150/three.js></script>"
        html = make_page(script="function setup() {}", head=broken + "\n")
        fixed = '<script defer src="https://cdn.example.com/three@0.150.0/build/three.min.js"></script>'
        oracle = FakeSuggestionOracle([fixed])
        executor = FakePageExecutor([ErrorEvent(
            type=EventType.REQUEST_FAILED,
            message="net::ERR_ABORTED",
            url="https://cdn.example.com/three@0.150/three.js",
        )])

        result = await CdnPass(oracle=oracle, executor=executor, sink=sink).run(html)

        assert result.fix_count == 1
        assert fixed in result.html
        assert broken not in result.html
        assert broken in oracle.calls[0]["user_prompt"]

    @pytest.mark.asyncio
    async def test_unavailable_oracle_leaves_tag(self, sink, unavailable_oracle):
        """Test there is no mechanical fallback for CDN tags."""
        executor = FakePageExecutor([CDN_FAILURE])

        result = await CdnPass(oracle=unavailable_oracle, executor=executor, sink=sink).run(CDN_PAGE)

        assert result.fix_count == 0
        assert result.html == CDN_PAGE

    @pytest.mark.asyncio
    async def test_no_failures(self, sink, quiet_executor):
        """Test the oracle is not consulted when every load succeeded."""
        oracle = FakeSuggestionOracle([FIXED_TAG])

        result = await CdnPass(oracle=oracle, executor=quiet_executor, sink=sink).run(CDN_PAGE)

        assert result.fix_count == 0
        assert oracle.call_count == 0


# ---------------------------------------------------------------------------
# NOT A FUNCTION
# ---------------------------------------------------------------------------

NAF_SCRIPT = (
    "function setup() {\n"
    "  createCanvas(400, 400);\n"
    "  p.spawn(1, 2);\n"
    "}"
)
NAF_PAGE = make_page(script=NAF_SCRIPT)
NAF_ERROR = page_error("TypeError: p.spawn is not a function")


class TestNotAFunctionPass:
    """Tests for the not-a-function pass."""

    @pytest.mark.asyncio
    async def test_mechanical_comment_out(self, sink, unavailable_oracle):
        """Test the call site is commented out when the oracle is unavailable."""
        executor = FakePageExecutor([NAF_ERROR])

        result = await NotAFunctionPass(oracle=unavailable_oracle, executor=executor, sink=sink).run(NAF_PAGE)

        assert result.fix_count == 1
        assert "  // ERROR: Block commented out due to missing function p.spawn" in result.html
        assert "  //   p.spawn(1, 2);" in result.html
        assert "  createCanvas(400, 400);" in result.html

    @pytest.mark.asyncio
    async def test_suggested_comment_out(self, sink):
        """Test a fully commented suggestion is applied with block indentation."""
        oracle = FakeSuggestionOracle(['[{"startLine": 4, "endLine": 4, "replacement": "// removed\\n// p.spawn(1, 2);"}]'])
        executor = FakePageExecutor([NAF_ERROR])

        result = await NotAFunctionPass(oracle=oracle, executor=executor, sink=sink).run(NAF_PAGE)

        assert result.fix_count == 1
        assert "  // removed\n  // p.spawn(1, 2);" in result.html

    @pytest.mark.asyncio
    async def test_uncommented_suggestion_falls_back(self, sink):
        """Test a replacement that is not entirely comments is replaced by the mechanical comment-out."""
        oracle = FakeSuggestionOracle(['[{"startLine": 4, "endLine": 4, "replacement": "p.spawn = () => {};"}]'])
        executor = FakePageExecutor([NAF_ERROR])

        result = await NotAFunctionPass(oracle=oracle, executor=executor, sink=sink).run(NAF_PAGE)

        assert result.fix_count == 1
        assert "p.spawn = () => {};" not in result.html
        assert "  //   p.spawn(1, 2);" in result.html
        assert "not fully commented" in sink.events("patch_skipped")[0]["reason"]

    @pytest.mark.asyncio
    async def test_unbalanced_suggestion_falls_back(self, sink):
        """Test a suggestion swallowing the closing brace is replaced by the mechanical comment-out."""
        oracle = FakeSuggestionOracle(['[{"startLine": 4, "endLine": 5, "replacement": "// removed spawn"}]'])
        executor = FakePageExecutor([NAF_ERROR])

        result = await NotAFunctionPass(oracle=oracle, executor=executor, sink=sink).run(NAF_PAGE)

        assert result.fix_count == 1
        assert "// removed spawn" not in result.html
        assert "  //   p.spawn(1, 2);\n}" in result.html
        assert "unbalanced" in sink.events("patch_skipped")[0]["reason"]

    @pytest.mark.asyncio
    async def test_no_type_errors(self, sink, quiet_executor, unavailable_oracle):
        """Test nothing happens without a not-a-function error."""
        result = await NotAFunctionPass(
            oracle=unavailable_oracle, executor=quiet_executor, sink=sink
        ).run(NAF_PAGE)

        assert result.fix_count == 0


class TestApplyBlockPatches:
    """Tests for bottom-up block replacement."""

    def test_out_of_range_and_overlap_dropped(self):
        """Test invalid and overlapping patches are skipped."""
        script = "a();\nb();\nc();"
        patches = [
            BlockPatch(start_line=2, end_line=3, replacement="// b\n// c"),
            BlockPatch(start_line=3, end_line=3, replacement="// c"),
            BlockPatch(start_line=5, end_line=6, replacement="// x"),
        ]

        patched, applied = apply_block_patches(script, patches)

        assert applied == [patches[1]]
        assert patched == "a();\nb();\n// c"


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

BROKEN_CSS_PAGE = make_page(script="let a = 1;", style="\nbody {\n  : red;\n}\n")


class TestCssPass:
    """Tests for the CSS pass."""

    @pytest.mark.asyncio
    async def test_suggested_css_applied(self, sink):
        """Test fenced CSS replaces the style body."""
        oracle = FakeSuggestionOracle(["```css\nbody {\n  color: red;\n}\n```"])

        result = await CssPass(oracle=oracle, sink=sink).run(BROKEN_CSS_PAGE)

        assert result.fix_count == 1
        assert "<style>\nbody {\n  color: red;\n}\n    </style>" in result.html

    @pytest.mark.asyncio
    async def test_no_changes_sentinel(self, sink):
        """Test the sentinel leaves the block as is."""
        oracle = FakeSuggestionOracle(["NO_CHANGES_NEEDED"])

        result = await CssPass(oracle=oracle, sink=sink).run(BROKEN_CSS_PAGE)

        assert result.fix_count == 0
        assert result.html == BROKEN_CSS_PAGE

    @pytest.mark.asyncio
    async def test_unavailable_oracle_uses_fallback(self, sink, unavailable_oracle):
        """Test the mechanical rewrite runs without an oracle."""
        result = await CssPass(oracle=unavailable_oracle, sink=sink).run(BROKEN_CSS_PAGE)

        assert result.fix_count == 1
        assert "position: red;" in result.html

    @pytest.mark.asyncio
    async def test_prose_answer_uses_fallback(self, sink):
        """Test an answer without CSS falls back to the mechanical rewrite."""
        oracle = FakeSuggestionOracle(["The CSS looks fine to me"])

        result = await CssPass(oracle=oracle, sink=sink).run(BROKEN_CSS_PAGE)

        assert result.fix_count == 1
        assert "position: red;" in result.html

    @pytest.mark.asyncio
    async def test_valid_css_not_sent(self, sink):
        """Test valid style blocks never reach the oracle."""
        oracle = FakeSuggestionOracle(["NO_CHANGES_NEEDED"])

        result = await CssPass(oracle=oracle, sink=sink).run(CLEAN_PAGE)

        assert result.fix_count == 0
        assert oracle.call_count == 0


# ---------------------------------------------------------------------------
# UNDEFINED VARIABLES
# ---------------------------------------------------------------------------

UNDEFINED_SCRIPT = "function draw() {\n  fish.uniforms.value.x = mouseX;\n}"
UNDEFINED_ERROR = console_error("Uncaught ReferenceError: fish is not defined")


class TestUndefinedVariablePass:
    """Tests for the undefined-variable pass."""

    @pytest.mark.asyncio
    async def test_fallback_declaration(self, sink, unavailable_oracle):
        """Test a default declaration is prepended without an oracle."""
        executor = FakePageExecutor([UNDEFINED_ERROR])

        result = await UndefinedVariablePass(
            oracle=unavailable_oracle, executor=executor, sink=sink
        ).run(make_page(script=UNDEFINED_SCRIPT))

        assert result.fix_count == 1
        assert (
            "let fish = { uniforms: { value: { x: 0, y: 0 } } }; "
            "// Added global declaration as fallback fix"
        ) in result.html

    @pytest.mark.asyncio
    async def test_conditional_declaration_hoisted_without_oracle(self, sink):
        """Test a conditionally declared name gets a top-level declaration directly."""
        oracle = FakeSuggestionOracle(["[]"])
        executor = FakePageExecutor([UNDEFINED_ERROR])
        script = "if (ready) {\n  var fish = {};\n}\nfish.x = 1;"

        result = await UndefinedVariablePass(
            oracle=oracle, executor=executor, sink=sink
        ).run(make_page(script=script))

        assert result.fix_count == 1
        assert "// Added at top level to fix variable scoping issue" in result.html
        assert oracle.call_count == 0

    @pytest.mark.asyncio
    async def test_suggested_line_replacement(self, sink):
        """Test a suggested replacement is applied by line number."""
        oracle = FakeSuggestionOracle([
            '[{"lineNumber": 3, "original": "  fish.uniforms.value.x = mouseX;", '
            '"replacement": "  if (window.fish) fish.uniforms.value.x = mouseX;"}]'
        ])
        executor = FakePageExecutor([UNDEFINED_ERROR])

        result = await UndefinedVariablePass(
            oracle=oracle, executor=executor, sink=sink
        ).run(make_page(script=UNDEFINED_SCRIPT))

        assert result.fix_count == 1
        assert "  if (window.fish) fish.uniforms.value.x = mouseX;" in result.html
        assert oracle.call_count == 1

    @pytest.mark.asyncio
    async def test_scripts_without_the_name_untouched(self, sink, unavailable_oracle):
        """Test only scripts mentioning the identifier are patched."""
        executor = FakePageExecutor([UNDEFINED_ERROR])
        html = make_page(script=UNDEFINED_SCRIPT).replace(
            "</body>", "<script>\nlet other = 1;\n</script>\n</body>"
        )

        result = await UndefinedVariablePass(
            oracle=unavailable_oracle, executor=executor, sink=sink
        ).run(html)

        assert result.fix_count == 1
        assert "<script>\nlet other = 1;\n</script>" in result.html

    @pytest.mark.asyncio
    async def test_no_reference_errors(self, sink, quiet_executor, unavailable_oracle):
        """Test nothing happens without a ReferenceError."""
        html = make_page(script=UNDEFINED_SCRIPT)

        result = await UndefinedVariablePass(
            oracle=unavailable_oracle, executor=quiet_executor, sink=sink
        ).run(html)

        assert result.fix_count == 0
        assert result.html == html


# ---------------------------------------------------------------------------
# PARENTHESES
# ---------------------------------------------------------------------------

PAREN_PAGE = make_page(script="createFish(p.random(3);")


class TestParenthesisPass:
    """Tests for the parenthesis pass."""

    @pytest.mark.asyncio
    async def test_deterministic_fallback(self, sink, unavailable_oracle):
        """Test the missing paren is inserted without an oracle."""
        result = await ParenthesisPass(oracle=unavailable_oracle, sink=sink).run(PAREN_PAGE)

        assert result.fix_count == 1
        assert "createFish(p.random(3));" in result.html

    @pytest.mark.asyncio
    async def test_suggested_fix(self, sink):
        """Test a suggested line fix is applied."""
        oracle = FakeSuggestionOracle([
            '[{"lineNumber": 2, "original": "createFish(p.random(3);", '
            '"fixed": "createFish(p.random(3));", "explanation": "close call"}]'
        ])

        result = await ParenthesisPass(oracle=oracle, sink=sink).run(PAREN_PAGE)

        assert result.fix_count == 1
        assert "createFish(p.random(3));" in result.html
        assert oracle.call_count == 1

    @pytest.mark.asyncio
    async def test_prose_answer_uses_deterministic_count(self, sink):
        """Test an unusable answer falls back with the deterministic fix count."""
        oracle = FakeSuggestionOracle(["Sorry, I cannot help with that."])
        html = make_page(script="a(b(c;")

        result = await ParenthesisPass(oracle=oracle, sink=sink).run(html)

        assert result.fix_count == 2
        assert "a(b(c));" in result.html

    @pytest.mark.asyncio
    async def test_shader_script_untouched(self, sink):
        """Test scripts containing shader code are never sent or patched."""
        oracle = FakeSuggestionOracle(["[]"])
        html = make_page(script="const m = new THREE.ShaderMaterial({ uniforms: u }; foo(")

        result = await ParenthesisPass(oracle=oracle, sink=sink).run(html)

        assert result.fix_count == 0
        assert result.html == html
        assert oracle.call_count == 0

    @pytest.mark.asyncio
    async def test_clean_document(self, sink, unavailable_oracle):
        """Test balanced scripts are untouched."""
        result = await ParenthesisPass(oracle=unavailable_oracle, sink=sink).run(CLEAN_PAGE)

        assert result.fix_count == 0
        assert result.html == CLEAN_PAGE


# ---------------------------------------------------------------------------
# SHADER
# ---------------------------------------------------------------------------

SHADER_BLOCK = "new THREE.ShaderMaterial({\n  vertexShader: vs,\n  fragmentShader: fs\n});"
FIXED_SHADER_BLOCK = "new THREE.ShaderMaterial({\n  vertexShader: vs,\n  fragmentShader: fixedFs\n});"
SHADER_PAGE = make_page(script=f"const mat = {SHADER_BLOCK}")
SHADER_ERROR = ErrorEvent(
    type=EventType.CONSOLE_MESSAGE,
    message="THREE.WebGLProgram: Shader Error 1282 - VALIDATE_STATUS false",
)


class TestShaderPass:
    """Tests for the shader pass."""

    @pytest.mark.asyncio
    async def test_block_rewritten(self, sink):
        """Test the suggested block replaces the failing one."""
        oracle = FakeSuggestionOracle([f"```javascript\n{FIXED_SHADER_BLOCK}\n```"])
        executor = FakePageExecutor([SHADER_ERROR])

        result = await ShaderPass(oracle=oracle, executor=executor, sink=sink).run(SHADER_PAGE)

        assert result.fix_count == 1
        assert FIXED_SHADER_BLOCK in result.html
        assert executor.calls[0]["settle_ms"] == settings.SHADER_SETTLE_MS

    @pytest.mark.asyncio
    async def test_no_shader_errors(self, sink, quiet_executor):
        """Test the oracle is not consulted when shaders compile."""
        oracle = FakeSuggestionOracle([FIXED_SHADER_BLOCK])

        result = await ShaderPass(oracle=oracle, executor=quiet_executor, sink=sink).run(SHADER_PAGE)

        assert result.fix_count == 0
        assert oracle.call_count == 0

    @pytest.mark.asyncio
    async def test_not_applicable_without_shader_material(self, sink, quiet_executor):
        """Test documents without ShaderMaterial skip the pass."""
        result = await ShaderPass(executor=quiet_executor, sink=sink).run(CLEAN_PAGE)

        assert result.skipped
        assert quiet_executor.calls == []
