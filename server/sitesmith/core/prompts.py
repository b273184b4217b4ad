# sitesmith/core/prompts.py
"""
Prompts used by the generation pipeline.

Goals:
- Ask for a single JSON object {"files": {...}} the recovery pipeline can parse.
- Keep the formatting rules short and explicit; models still break them, which
  is why the output goes through extraction and repair anyway.
"""

import json
from typing import Any, Dict, List, Optional


def build_system_prompt(project_type: Optional[str] = None) -> str:
    """
    System prompt for the multi-file code generation agent.
    """
    kind = project_type or "web"
    return (
        f"You are an expert web developer generating the initial code files for a {kind} project.\n"
        "Generate the essential files that give the user a strong, working starting point.\n"
        "For a website, typically HTML pages, CSS and JavaScript. For a web app, the main\n"
        "components, styling and utility modules.\n\n"
        "OUTPUT RULES:\n"
        " - Return EXACTLY one JSON object and nothing else: no prose, no markdown fences.\n"
        " - Shape: {\"files\": {\"relative/path.ext\": {\"content\": \"...\", \"language\": \"html\"}, ...}}\n"
        " - Every property name is double-quoted and followed by a colon.\n"
        " - Escape every quote inside file content as \\\" and every newline as \\n.\n"
        " - Paths use '/' and only letters, digits, '_', '-', '.' and spaces.\n"
        " - Focus on quality over quantity; include only essential files.\n"
        "\nExample:\n"
        "{\"files\":{\"index.html\":{\"content\":\"<!DOCTYPE html>\\n<html>\\n<body>\\n  <h1>Hello</h1>\\n</body>\\n</html>\",\"language\":\"html\"}}}\n"
    )


def _format_user_flow(user_flow: Any) -> str:
    if not isinstance(user_flow, list) or not user_flow:
        return "Not specified"
    return "\n".join(f"Step {i + 1}: {step}" for i, step in enumerate(user_flow))


def _format_plan(ai_response: Optional[str]) -> str:
    if not ai_response:
        return ""
    try:
        plan = json.loads(ai_response)
    except ValueError:
        return ""
    if not isinstance(plan, dict):
        return ""
    features: List[str] = [str(f) for f in plan.get("keyFeatures") or plan.get("features") or []]
    stack: List[str] = [str(t) for t in plan.get("techStack") or []]
    lines = [
        "Additionally, here's an AI-generated development plan for this project:",
        f"Summary: {plan.get('summary', '')}",
        "Key Features:",
        *[f"- {f}" for f in features],
        "Tech Stack:",
        *[f"- {t}" for t in stack],
    ]
    return "\n".join(lines)


def build_user_prompt(params: Dict[str, Any]) -> str:
    """
    Prompt body for the main generation step. params are the normalized
    request parameters (the same ones the cache key is built from).
    """
    prompt = (
        f"I need the initial code files for a {params.get('projectType') or 'web'} project:\n\n"
        f"Project Name: {params.get('name', '')}\n"
        f"Description: {params.get('description', '')}\n"
        f"Target Audience: {params.get('targetAudience') or 'General users'}\n"
        f"Value Proposition: {params.get('valueProposition') or 'Not specified'}\n"
        f"User Flow:\n{_format_user_flow(params.get('userFlow'))}\n\n"
    )
    plan = _format_plan(params.get("aiResponse"))
    if plan:
        prompt += plan + "\n\n"
    prompt += (
        "Generate well-structured, functional files that work together.\n"
        "Output: the single JSON object described by the system prompt. No extra text."
    )
    return prompt


def build_file_system_prompt(project_type: Optional[str] = None) -> str:
    return (
        f"You are an expert developer generating a single code file for a {project_type or 'web'} project.\n"
        "Respond ONLY with the raw file content: no explanations, no markdown, no ``` fences.\n"
        "The entire response is inserted directly into the code editor."
    )


def build_file_user_prompt(file_name: str,
                           language: str,
                           project_name: Optional[str],
                           project_description: Optional[str],
                           project_type: Optional[str],
                           existing_files: Optional[List[str]] = None) -> str:
    lines = [
        "Please generate the code for a file with the following details:",
        "",
        f"File name: {file_name}",
        f"Language: {language}",
        f"Project name: {project_name or 'Not specified'}",
        f"Project description: {project_description or 'Not specified'}",
        f"Project type: {project_type or 'Web project'}",
    ]
    if existing_files:
        lines += ["", "Other files in the project:", *existing_files]
    lines += ["", "Remember: respond with the file content only."]
    return "\n".join(lines)


def build_competitor_prompt(project_name: str, project_description: str, business_type: str) -> str:
    return (
        f"I'm creating a new {business_type} called \"{project_name}\". "
        f"Here's a description: \"{project_description}\".\n\n"
        "Please find 3-5 top competitors in this market space. For each competitor, provide:\n"
        "1. Name\n"
        "2. Brief description of what they do\n"
        "3. Website URL if available\n\n"
        "Format your response as a valid JSON array of objects with this structure:\n"
        "[{\"name\": \"Competitor Name\", \"description\": \"Brief description\", \"url\": \"https://example.com\"}]\n\n"
        "Only return the JSON array, no other text."
    )
