# sitesmith/core/templates.py
"""
Deterministic fallback content used when the model is unavailable or its
output cannot be recovered.
"""
import html
from typing import Any, Dict, Optional

from sitesmith.core.file_tree import create_file


def _index_html(title: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <header>
    <h1>Welcome to {title}</h1>
    <nav>
      <ul>
        <li><a href="#home">Home</a></li>
        <li><a href="#about">About</a></li>
        <li><a href="#contact">Contact</a></li>
      </ul>
    </nav>
  </header>
  <main>
    <section id="home">
      <h2>Home</h2>
      <p>This is the home section of {title}.</p>
    </section>
    <section id="about">
      <h2>About</h2>
      <p>Learn more about what we do.</p>
    </section>
    <section id="contact">
      <h2>Contact</h2>
      <p>Get in touch with us.</p>
    </section>
  </main>
  <footer>
    <p>&copy; {title}. All rights reserved.</p>
  </footer>
  <script src="script.js"></script>
</body>
</html>"""


STYLES_CSS = """/* Basic reset */
* {
  margin: 0;
  padding: 0;
  box-sizing: border-box;
}

body {
  font-family: Arial, sans-serif;
  line-height: 1.6;
  color: #333;
  max-width: 1200px;
  margin: 0 auto;
  padding: 20px;
}

header {
  display: flex;
  justify-content: space-between;
  align-items: center;
  padding: 20px 0;
  border-bottom: 1px solid #eee;
  margin-bottom: 30px;
}

nav ul {
  display: flex;
  list-style: none;
}

nav li {
  margin-left: 20px;
}

section {
  margin-bottom: 40px;
}

footer {
  text-align: center;
  padding: 20px 0;
  border-top: 1px solid #eee;
}"""


SCRIPT_JS = """// Main JavaScript file

document.addEventListener('DOMContentLoaded', function() {
  // smooth scrolling for navigation links
  document.querySelectorAll('nav a').forEach(anchor => {
    anchor.addEventListener('click', function(e) {
      e.preventDefault();
      const href = this.getAttribute('href');
      if (!href) return;
      const targetSection = document.querySelector(href);
      if (targetSection) {
        window.scrollTo({ top: targetSection.offsetTop - 70, behavior: 'smooth' });
      }
    });
  });
});"""


def default_site_files(project_name: Optional[str] = None, now: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
    """Three-file static site as a flat file map."""
    title = html.escape(project_name or "My Website")
    files: Dict[str, Dict[str, Any]] = {}
    files = create_file(files, "index.html", _index_html(title), now=now)
    files = create_file(files, "styles.css", STYLES_CSS, now=now)
    files = create_file(files, "script.js", SCRIPT_JS, now=now)
    return files


def placeholder_file_content(file_name: str, language: str,
                             project_name: Optional[str] = None,
                             project_description: Optional[str] = None) -> str:
    name = project_name or "My Project"
    if language == "html":
        return (
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n"
            "  <meta charset=\"UTF-8\">\n"
            f"  <title>{html.escape(name)}</title>\n"
            "  <link rel=\"stylesheet\" href=\"styles.css\">\n"
            "</head>\n<body>\n"
            f"  <h1>{html.escape(name)}</h1>\n"
            f"  <p>{html.escape(project_description or 'This is a sample project description.')}</p>\n"
            "  <script src=\"script.js\"></script>\n"
            "</body>\n</html>"
        )
    if language == "css":
        return f"/* Styles for {name} */\n" + STYLES_CSS.split("\n", 1)[1]
    if language in ("javascript", "js"):
        return (
            f"// JavaScript for {name}\n\n"
            "document.addEventListener('DOMContentLoaded', function() {\n"
            "  // Add your JavaScript code here\n"
            "});"
        )
    return (
        f"// Generated content for {file_name}\n"
        f"// This is a placeholder for {language} content.\n"
        "// Add your code here."
    )
