import base64
from datetime import datetime, timedelta
from types import SimpleNamespace

from report import render_analysis_page, render_report, render_report_html, render_viewer_page
from report.render import render_comprehensive_analysis


def _sections(html: str) -> list[str]:
    return [part for part in html.split("<section>") if part]


REPORT = """# Repository Analysis

## 1. APPLICATION SUMMARY
- A todo app built with **React**

## 2. NOTABLE CODE SECTIONS (Interview Focus)
The `useTodos()` hook keeps state.
```ts
const done = todos.filter(t => t.done && t.id < 10);
```

## 3. AUTHENTICATION ANALYSIS
The `useTodos()` hook is not auth related.
```python
# no auth here
x = 1
```

## 7. LEARNING QUIZ QUESTIONS
**Question 1:** What is a hook?
**Expected Answer:** A function that uses React state.
**Follow-up:** Name two built-in hooks.

**Question 2:** Why memoize?
**Expected Answer:** To avoid recomputation.
**Follow-up:** When is it harmful?

## 8. SUPPLEMENTAL LEARNING RESOURCES
**Resource 1:** React Docs - https://react.dev - Official docs
**Resource 2:** Hooks Guide - [Hooks at a Glance](https://react.dev/reference/react) - Reference
"""


def test_title_line_is_removed():
    html = render_report_html(REPORT)
    assert "Repository Analysis" not in html
    assert html.startswith("<section>\n<h2>1. APPLICATION SUMMARY</h2>")


def test_comment_inside_code_fence_survives():
    assert "# no auth here" in render_report_html(REPORT)


def test_code_promotion_only_touches_section_two():
    sections = _sections(render_report_html(REPORT))
    notable = next(s for s in sections if "<h2>2." in s)
    auth = next(s for s in sections if "<h2>3." in s)

    assert "<code>useTodos()</code>" in notable
    assert "<pre><code>const done = todos.filter(t =&gt; t.done &amp;&amp; t.id &lt; 10);</code></pre>" in notable
    assert "inline-code" not in notable

    assert '<span class="inline-code">useTodos()</span>' in auth
    assert '<pre class="code-block"># no auth here\nx = 1</pre>' in auth
    assert "<code>" not in auth


def test_quiz_questions_render_as_details():
    html = render_report_html(REPORT)
    assert html.count("<details>") == 2
    assert "**Question" not in html
    quiz = next(s for s in _sections(html) if "<h2>7." in s)
    assert quiz.count("<details>") == 2


def test_resources_go_under_existing_heading():
    html = render_report_html(REPORT)
    assert html.count("SUPPLEMENTAL LEARNING RESOURCES") == 1
    assert html.count("<li>React Docs - https://react.dev</li>") == 1

    resources = next(s for s in _sections(html) if "<h2>8." in s)
    assert resources.count("<ul>") == 1
    assert "<li>React Docs - https://react.dev</li>" in resources
    assert "<li>Hooks at a Glance - https://react.dev/reference/react</li>" in resources
    assert "**Resource" not in html


def test_resources_without_heading_get_a_new_final_section():
    html = render_report_html(
        "## 1. APPLICATION SUMMARY\nText\n\n"
        "**Resource 1:** A - https://a.dev - first\n"
        "**Resource 2:** B - https://b.dev - second\n"
        "**Resource 3:** C - https://c.dev - third"
    )
    assert html.count("<h2>8. SUPPLEMENTAL LEARNING RESOURCES</h2>") == 1
    last = _sections(html)[-1]
    assert last.startswith("\n<h2>8. SUPPLEMENTAL LEARNING RESOURCES</h2>")
    assert last.count("<li>") == 3
    assert html.endswith("</ul>\n</section>")


def test_no_resources_means_no_resource_list():
    html = render_report_html("## 1. APPLICATION SUMMARY\nText")
    assert "<ul>" not in html
    assert "SUPPLEMENTAL" not in html


def test_resources_heading_with_bold_markers_is_found():
    document = render_report(
        "## 8. **SUPPLEMENTAL LEARNING RESOURCES**\n**Resource 1:** A - https://a.dev - x"
    )
    assert len(document.sections) == 2  # preamble + section 8
    assert document.section(8).body[0].startswith("<ul>")


def test_attach_diagram_targets_section_node():
    document = render_report("## 4. PROJECT STRUCTURE\nFolders\n\n## 5. DATA FLOW ARCHITECTURE\nFlow")
    assert document.attach_diagram(4, "data:image/svg+xml;base64,AAAA", "Project Structure Diagram")
    assert not document.attach_diagram(6, "data:image/svg+xml;base64,AAAA", "missing")
    assert not document.attach_diagram(5, None, "no payload")

    html = document.to_html()
    structure = next(s for s in _sections(html) if "<h2>4." in s)
    assert '<img src="data:image/svg+xml;base64,AAAA" alt="Project Structure Diagram"' in structure
    assert html.count("<img") == 1


def test_malformed_markdown_passes_through_as_paragraphs():
    html = render_report_html("no headings at all\n**Question 1:** dangling")
    assert html == (
        "<section>\n"
        "<p>no headings at all</p>\n"
        "<p><strong>Question 1:</strong> dangling</p>\n"
        "</section>"
    )


def test_model_html_is_escaped():
    html = render_report_html("## 1. A <script>alert(1)</script>\n<img src=x onerror=alert(1)>")
    assert "<script>" not in html
    assert "<img" not in html
    assert "&lt;script&gt;" in html


# =============================================================================
# PAGE SHELLS
# =============================================================================

def _explanation(explanation_type, file_path, content="", diagram_url=None, created_at=None):
    return SimpleNamespace(
        explanation_type=explanation_type,
        file_path=file_path,
        content=content,
        diagram_url=diagram_url,
        created_at=created_at or datetime(2024, 1, 1),
    )


def _repository(**overrides):
    fields = dict(
        id="repo-1",
        name="todo-app",
        source_type="github",
        source_url="https://github.com/acme/todo-app",
        file_count=3,
        total_size=4096,
        language_list=["TypeScript", "Python"],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_comprehensive_analysis_attaches_three_diagrams():
    report = "## 4. PROJECT STRUCTURE\na\n## 5. DATA FLOW ARCHITECTURE\nb\n## 6. CODE ANALOGIES & EXPLANATIONS\nc"
    explanations = [
        _explanation("comprehensive", "comprehensive-analysis", report, "data:image/svg+xml;base64,STRUCT"),
        _explanation("diagram", "data-flow-diagram", diagram_url="data:image/svg+xml;base64,FLOW"),
        _explanation("diagram", "code-analogies-diagram", diagram_url="data:image/svg+xml;base64,ANALOGY"),
    ]
    html = render_comprehensive_analysis(explanations)
    sections = _sections(html)

    assert "STRUCT" in next(s for s in sections if "<h2>4." in s)
    assert "FLOW" in next(s for s in sections if "<h2>5." in s)
    assert 'alt="State &amp; Props Flow Tree Structure"' in html
    assert "ANALOGY" in next(s for s in sections if "<h2>6." in s)


def test_latest_comprehensive_analysis_wins():
    old = _explanation("comprehensive", "comprehensive-analysis", "## 1. OLD\nx", created_at=datetime(2024, 1, 1))
    new = _explanation("comprehensive", "comprehensive-analysis", "## 1. NEW\nx",
                       created_at=datetime(2024, 1, 1) + timedelta(days=1))
    html = render_comprehensive_analysis([new, old])
    assert "NEW" in html
    assert "OLD" not in html


def test_analysis_page_without_comprehensive_analysis():
    page = render_analysis_page(_repository(), [_explanation("overview", "src/app.py", "text")])
    assert "No comprehensive analysis found" in page
    assert "todo-app - Code Analysis" in page


def test_analysis_page_empty():
    page = render_analysis_page(_repository(source_url=None), [])
    assert "No analysis found" in page
    assert "Source:" not in page


def test_viewer_page_escapes_repository_fields():
    page = render_viewer_page([_repository(name="<b>evil</b>", language_list=[])])
    assert "&lt;b&gt;evil&lt;/b&gt;" in page
    assert "<b>evil</b>" not in page
    assert "<strong>Languages:</strong> Unknown" in page
    assert "<strong>Size:</strong> 4 KB" in page
    assert 'href="/repositories/repo-1/explanations"' in page


def test_viewer_page_empty():
    assert "No repositories analyzed yet" in render_viewer_page([])


def test_diagram_data_uri_is_decodable():
    svg = "<svg>café</svg>"
    uri = "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")
    document = render_report("## 4. PROJECT STRUCTURE\nx")
    document.attach_diagram(4, uri, "d")
    assert uri in document.to_html()


def test_bulleted_resources_render_as_one_list_without_residue():
    html = render_report_html(
        "## 8. SUPPLEMENTAL LEARNING RESOURCES\n"
        "- **Resource 1:** A - https://a.dev - x\n"
        "- **Resource 2:** B - https://b.dev - y\n"
        "- **Resource 3:** C - https://c.dev - z"
    )
    assert html.count("<ul>") == 1
    assert html.count("<li>") == 3
    assert "<p>-</p>" not in html
    assert "**Resource" not in html
