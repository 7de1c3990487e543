"""
Report rendering pipeline and HTML page shells.

render_report() takes the raw model markdown and returns a Document:

    1. stash fenced code blocks
    2. drop top-level "# " title lines (the page supplies its own title)
    3. rewrite quiz triples into <details> blocks
    4. extract resource citations
    5. scan lines into sections, lists and paragraphs
    6. promote code markup in section 2
    7. reinsert the resource list
"""

import re

from .blocks import scan_blocks
from .document import Document
from .markup import (
    BlockStash,
    convert_code_fences,
    escape_html,
    extract_resources,
    transform_quiz_blocks,
)

TITLE_LINE_RE = re.compile(r"^#[ \t]+.*(?:\n|$)", re.MULTILINE)

NOTABLE_CODE_SECTION = 2

COMPREHENSIVE_PATH = "comprehensive-analysis"
DATA_FLOW_DIAGRAM_PATH = "data-flow-diagram"
CODE_ANALOGIES_DIAGRAM_PATH = "code-analogies-diagram"

# section number, sentinel file path (None = the analysis row itself), alt text
DIAGRAM_PLACEMENTS = (
    (4, None, "Project Structure Diagram"),
    (5, DATA_FLOW_DIAGRAM_PATH, "State & Props Flow Tree Structure"),
    (6, CODE_ANALOGIES_DIAGRAM_PATH, "Code Analogies & Visual Explanations"),
)


def render_report(markdown: str) -> Document:
    text = markdown.replace("\x00", "").replace("\r\n", "\n")
    stash = BlockStash()
    text = convert_code_fences(text, stash)
    text = TITLE_LINE_RE.sub("", text)
    text = transform_quiz_blocks(text, stash)
    text, resources = extract_resources(text)

    document = scan_blocks(text, stash)
    document.promote_code(NOTABLE_CODE_SECTION)
    document.attach_resources(resources)
    return document


def render_report_html(markdown: str) -> str:
    return render_report(markdown).to_html()


def _latest(explanations, explanation_type: str):
    matching = [e for e in explanations if e.explanation_type == explanation_type]
    if not matching:
        return None
    return max(matching, key=lambda e: e.created_at)


def render_comprehensive_analysis(explanations) -> str | None:
    """Render the newest comprehensive analysis with its diagrams attached."""
    analysis = _latest(explanations, "comprehensive")
    if analysis is None:
        return None

    document = render_report(analysis.content)
    diagrams_by_path = {
        e.file_path: e.diagram_url
        for e in explanations
        if e.explanation_type == "diagram" and e.diagram_url
    }
    for number, file_path, alt in DIAGRAM_PLACEMENTS:
        data_uri = analysis.diagram_url if file_path is None else diagrams_by_path.get(file_path)
        document.attach_diagram(number, data_uri, alt)

    return f"""
<div class="explanation">
  <h1>Comprehensive Repository Analysis for Interview Preparation</h1>
  <div class="content">
    {document.to_html()}
  </div>
  <small><strong>Type:</strong> {escape_html(analysis.explanation_type)} | <strong>Created:</strong> {analysis.created_at}</small>
</div>"""


# =============================================================================
# PAGE SHELLS
# =============================================================================

VIEWER_STYLE = """
        body { font-family: Arial, sans-serif; margin: 40px; background: #f5f5f5; }
        .container { max-width: 1200px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        h1 { color: #333; border-bottom: 3px solid #007acc; padding-bottom: 10px; }
        .repo { border: 1px solid #ddd; margin: 20px 0; padding: 20px; border-radius: 5px; background: #fafafa; }
        .repo h3 { margin-top: 0; color: #007acc; }
        .repo-info { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 10px; margin: 10px 0; }
        .repo-info span { background: #e7f3ff; padding: 5px 10px; border-radius: 3px; font-size: 0.9em; }
        .actions { margin-top: 15px; }
        .btn { display: inline-block; padding: 8px 16px; margin: 5px; background: #007acc; color: white; text-decoration: none; border-radius: 4px; font-size: 0.9em; }
        .btn:hover { background: #005a9e; }
        .empty { text-align: center; color: #666; font-style: italic; padding: 40px; }
"""

ANALYSIS_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif; margin: 0; background: #f8fafc; line-height: 1.4rem; }
        .header { background: linear-gradient(135deg, #007acc 0%, #005a9e 100%); color: white; padding: 24px 0; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        .container { max-width: 1200px; margin: 0 auto; padding: 0 24px; }
        .content { background: white; margin: 24px auto; max-width: 1200px; padding: 40px; border-radius: 12px; box-shadow: 0 4px 20px rgba(0,0,0,0.08); }
        h1 { margin: 0; font-size: 28px; font-weight: 600; }
        .repo-info { background: linear-gradient(135deg, #e7f3ff 0%, #f0f8ff 100%); padding: 20px; border-radius: 8px; margin: 24px 0; border-left: 4px solid #007acc; }
        .repo-info a { color: #007acc; text-decoration: none; font-weight: 500; }
        .explanation { border: 1px solid #e2e8f0; margin: 32px 0; padding: 32px; border-radius: 12px; background: #ffffff; box-shadow: 0 2px 8px rgba(0,0,0,0.04); }
        .empty { text-align: center; color: #64748b; font-style: italic; padding: 60px; font-size: 18px; }
        .back-btn { display: inline-block; padding: 12px 20px; background: #10b981; color: white; text-decoration: none; border-radius: 8px; margin-bottom: 24px; font-weight: 500; }
        .back-btn:hover { background: #059669; }
        .content h2 { color: #1e293b; border-bottom: 3px solid #007acc; padding-bottom: 8px; margin: 40px 0 20px 0; font-weight: 600; font-size: 24px; }
        .content h3 { color: #334155; margin: 32px 0 16px 0; font-size: 20px; font-weight: 600; }
        .content p { margin: 16px 0; color: #374151; line-height: 1.6; }
        .content ul, .content ol { margin: 16px 0; padding-left: 24px; }
        .content li { margin: 8px 0; color: #374151; line-height: 1.5; }
        .content .inline-code { background: #f1f5f9; padding: 3px 6px; border-radius: 4px; font-family: 'SF Mono', Monaco, Consolas, 'Courier New', monospace; font-size: 14px; color: #e11d48; }
        .content pre { background: #f8fafc; padding: 24px; border-radius: 8px; overflow-x: auto; margin: 20px 0; border: 1px solid #e2e8f0; font-size: 14px; line-height: 1.5; }
        .content pre.code-block { color: #374151; font-family: 'SF Mono', Monaco, Consolas, 'Courier New', monospace; }
        .content strong { color: #1e293b; font-weight: 600; }
        .content details { background: linear-gradient(135deg, #f0f9ff 0%, #e0f2fe 100%); border: 1px solid #0ea5e9; border-radius: 12px; padding: 20px; margin: 20px 0; }
        .content details summary { cursor: pointer; font-weight: 600; color: #0c4a6e; font-size: 16px; list-style: none; outline: none; }
        .content details summary::-webkit-details-marker { display: none; }
        .content details summary::before { content: "▶"; margin-right: 8px; transition: transform 0.2s; }
        .content details[open] summary::before { transform: rotate(90deg); }
        .content details[open] summary { margin-bottom: 16px; padding-bottom: 12px; border-bottom: 1px solid #bae6fd; }
        .content details p { margin: 12px 0; padding-left: 16px; }
        .diagram { text-align: center; margin: 32px 0; padding: 24px; background: linear-gradient(135deg, #f9fafb 0%, #f3f4f6 100%); border-radius: 12px; border: 1px solid #e5e7eb; }
        .diagram img { max-width: 100%; height: auto; border-radius: 8px; box-shadow: 0 4px 12px rgba(0,0,0,0.1); }
        @media (max-width: 768px) {
            .content { margin: 16px; padding: 24px; }
            .container { padding: 0 16px; }
            .content h2 { font-size: 20px; }
        }
"""


def _languages_label(repository) -> str:
    return escape_html(", ".join(repository.language_list) or "Unknown")


def _size_kb(repository) -> int:
    return round((repository.total_size or 0) / 1024)


def render_viewer_page(repositories) -> str:
    if not repositories:
        cards = '<div class="empty">No repositories analyzed yet. Use POST /repositories/analyze to analyze a GitHub repository!</div>'
    else:
        rendered = []
        for repo in repositories:
            source_link = ""
            if repo.source_url:
                source_link = f'<a href="{escape_html(repo.source_url)}" target="_blank" class="btn">GitHub Repo</a>'
            rendered.append(f"""
            <div class="repo">
                <h3>{escape_html(repo.name)}</h3>
                <div class="repo-info">
                    <span><strong>Files:</strong> {repo.file_count}</span>
                    <span><strong>Size:</strong> {_size_kb(repo)} KB</span>
                    <span><strong>Languages:</strong> {_languages_label(repo)}</span>
                    <span><strong>Source:</strong> {escape_html(repo.source_type)}</span>
                </div>
                <div class="actions">
                    <a href="/repositories/{escape_html(repo.id)}/explanations" class="btn">View Analysis</a>
                    {source_link}
                </div>
            </div>""")
        cards = "".join(rendered)

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Code Tutor - Analysis Viewer</title>
    <style>{VIEWER_STYLE}</style>
</head>
<body>
    <div class="container">
        <h1>Code Tutor - Analysis Viewer</h1>
        <p>View comprehensive code analysis results for interview preparation</p>
        {cards}
    </div>
</body>
</html>"""


def render_analysis_page(repository, explanations) -> str:
    if not explanations:
        body = '<div class="empty">No analysis found. Use POST /repositories/analyze to generate a comprehensive analysis!</div>'
    else:
        body = render_comprehensive_analysis(explanations) or (
            '<div class="empty">No comprehensive analysis found. Use POST /repositories/analyze to generate one!</div>'
        )

    source = ""
    if repository.source_url:
        url = escape_html(repository.source_url)
        source = f'<br>\n            <strong>Source:</strong> <a href="{url}" target="_blank">{url}</a>'

    name = escape_html(repository.name)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{name} - Code Analysis</title>
    <style>{ANALYSIS_STYLE}</style>
</head>
<body>
    <div class="header">
        <div class="container">
            <h1>{name} - Code Analysis</h1>
        </div>
    </div>
    <div class="content">
        <a href="/viewer" class="back-btn">← Back to All Repositories</a>

        <div class="repo-info">
            <strong>Repository:</strong> {name}<br>
            <strong>Files:</strong> {repository.file_count} |
            <strong>Size:</strong> {_size_kb(repository)} KB |
            <strong>Languages:</strong> {_languages_label(repository)}{source}
        </div>

        {body}
    </div>
</body>
</html>"""
