"""Example demonstrating PDF, DOCX and HTML export.

This example shows how to:
1. Load a saved citation service response
2. Edit a citation the way the rich-text editor would
3. Export every result to PDF, DOCX and HTML

No API key is needed: the response is loaded, not generated.
"""
from citeme import CiteMe, Config

RESPONSE = {
    "results": [
        {
            "fileName": "essay.pdf",
            "citation": (
                "Background\n"
                "The court in Smith v Jones [2020] UKSC 1 took a narrow view [1].\n"
                "As noted by later commentators, the decision was followed [2]."
            ),
            "footnotes": "1. Smith v Jones [2020] UKSC 1\n\n2. R v Brown [1994] 1 AC 212",
        }
    ]
}


def main():
    session = CiteMe(config=Config(citation_style="OSCOLA", enable_rate_limiting=False))
    session.load_response(RESPONSE)

    print("Formatted citation:")
    print(session.formatted("essay.pdf"))

    session.update_content(
        "essay.pdf",
        session.content("essay.pdf") + "\nThe rule was later restated in R v Brown [1994] 1 AC 212 [2].",
    )

    paths = session.export_all("./output", formats=("pdf", "docx", "html"))
    for path in paths:
        print(f"✓ {path}")

    # A failed export carries its error instead of raising
    result = session.export("essay.pdf", "odt")
    if not result.ok:
        print(f"✗ {result.error}")


if __name__ == "__main__":
    main()
