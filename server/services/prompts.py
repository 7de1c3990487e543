"""
Prompt builders for the Gemini calls.
"""

COMPREHENSIVE_TITLE = "Comprehensive Repository Analysis for Interview Preparation"
DATA_FLOW_TITLE = "Data Flow & State/Props Architecture"
CODE_ANALOGIES_TITLE = "Code Analogies & Visual Explanations"
AUTH_FLOW_TITLE = "Authentication Flow Analysis"


def _files_block(code_files: list[tuple[str, str]]) -> str:
    return "\n".join(f"=== {path} ===\n{content}\n" for path, content in code_files)


def build_analysis_prompt(name: str, source: str, languages: list[str], code_files: list[tuple[str, str]]) -> str:
    return f"""You are a senior software engineer conducting a comprehensive code review for interview preparation. Analyze this repository thoroughly:

Repository: {name}
Source: {source}
Files analyzed: {len(code_files)}
Languages: {", ".join(languages)}

FILES CONTENT:
{_files_block(code_files)}

Please provide a comprehensive analysis in the following format. Use proper markdown formatting:

## 1. APPLICATION SUMMARY
- What does this application do?
- What technologies, frameworks, and libraries are used?
- What is the overall architecture?
- What problem does it solve?

## 2. NOTABLE CODE SECTIONS (Interview Focus)
Identify 3-5 code sections that an interviewer might ask about:
- Complex algorithms or logic
- Design patterns used
- State management approaches
- API integrations
- Performance considerations
- Error handling patterns

## 3. AUTHENTICATION ANALYSIS
- Are there any authentication patterns?
- Security implementations?
- Authorization flows?
- Session management?
- If no auth: "No authentication patterns found"

## 4. PROJECT STRUCTURE
Describe the project structure and file organization in text format.

## 5. DATA FLOW ARCHITECTURE
Describe the data flow, shared state, and component relationships in text format. If state and props are not used in this application, explicitly state: "State and props are not used in this application."

## 6. CODE ANALOGIES & EXPLANATIONS
For each notable code section, provide:
- Simple analogy to explain the concept
- Why this pattern was chosen
- Potential interview questions about this code

## 7. LEARNING QUIZ QUESTIONS
Generate 10 technical interview questions based on this codebase. Focus on:
- Major technologies and frameworks used
- Core concepts that interviewers commonly ask about
- How these technologies are specifically implemented in this codebase
- Broader technical concepts that relate to the code

Mix specific application questions with general technical knowledge questions that a developer should know.

Format in this EXACT format:

**Question 1:** [Question text]
**Expected Answer:** [Answer]
**Follow-up:** [Follow-up question]

**Question 2:** [Question text]
**Expected Answer:** [Answer]
**Follow-up:** [Follow-up question]

[Continue for 10 questions]

## 8. SUPPLEMENTAL LEARNING RESOURCES
Provide 5-7 additional resources (documentation, articles, videos, tutorials) that would help someone learn more about the technologies and concepts used in this codebase:

**Resource 1:** [Title] - [URL] - [Brief description]
**Resource 2:** [Title] - [URL] - [Brief description]
[Continue for 5-7 resources]

Be thorough but concise. Focus on what would be most valuable for interview preparation."""


def build_explain_prompt(explanation_type: str, file_path: str, code_section: str) -> str:
    return f"""Analyze this {explanation_type} code section and provide a comprehensive explanation:

File: {file_path}
Code:
```
{code_section}
```

Please provide:
1. A clear title for this code section
2. A detailed explanation of what the code does
3. Key concepts and patterns used
4. If this is an authentication flow, include security considerations
5. Generate a Mermaid diagram if applicable for flows or architecture

Format your response as JSON with fields: title, content (markdown), diagram (mermaid syntax if applicable)

Return ONLY the JSON object, no other text or markdown formatting."""


def build_quiz_prompt(question_count: int, difficulty: str, explanation_content: str) -> str:
    return f"""Based on these code explanations, generate {question_count} {difficulty} level quiz questions:

{explanation_content}

Generate questions that test understanding of:
- Code functionality and purpose
- Design patterns and best practices
- Security considerations (if applicable)
- Architecture and flow understanding

Format as JSON array with objects containing:
- id: unique identifier
- question: the question text
- options: array of 4 possible answers
- correctAnswer: the correct option
- explanation: brief explanation of why the answer is correct

Return ONLY the JSON array, no other text or markdown formatting."""


def build_auth_flow_prompt(auth_files: list[tuple[str, str]]) -> str:
    auth_code = "".join(f"\n\n=== {path} ===\n{content}" for path, content in auth_files)
    return f"""Analyze this authentication flow code and provide:

1. Authentication method used (JWT, OAuth, sessions, etc.)
2. Security strengths and potential vulnerabilities
3. Flow diagram in Mermaid syntax
4. Recommendations for improvement

Code:
{auth_code}"""


# Diagram descriptions; keywords here drive report.diagrams.classify_diagram

def project_structure_description(name: str) -> str:
    return f"Project structure and file organization for {name} - show folders, files, and architecture hierarchy"


def data_flow_description(name: str) -> str:
    return f"Data flow and state/props tree structure for {name} - show component relationships and data flow"


def code_analogies_description(name: str) -> str:
    return f"Code analogies and explanations diagram for {name} - visual representations of key concepts"
