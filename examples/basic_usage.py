"""Basic usage example for CiteMe."""
import os

from citeme import CiteMe, normalize_bibliography, format_citation


def main():
    # Example 1: Format citation text without calling any model
    print("=== Example 1: Formatting ===")
    text = (
        "Introduction\n"
        "According to recent work, courts adapt quickly (Smith, 2020).\n"
        "Smith, J. (2020). Legal writing. Oxford Press."
    )
    print(format_citation(text, "APA"))

    # Example 2: Normalize a messy footnote list
    print("\n=== Example 2: Normalization ===")
    footnotes = "1. Smith v Jones [2020] UKSC 1\r\n\r\n\r\n2.  R v Brown [1994] 1 AC 212"
    print(normalize_bibliography(footnotes, "OSCOLA"))

    # Example 3: Generate citations for reference PDFs
    gemini_key = os.getenv("GEMINI_API_KEY")
    if not gemini_key:
        print("\nSet GEMINI_API_KEY to run the generation example.")
        return

    print("\n=== Example 3: Generation ===")
    session = CiteMe(gemini_api_key=gemini_key, citation_style="Harvard")
    response = session.generate(["./references/smith2020.pdf"])

    for result in response.results:
        print(f"{result.file_name}: {result.citation}")
    for error in response.errors:
        print(f"✗ {error}")


if __name__ == "__main__":
    main()
