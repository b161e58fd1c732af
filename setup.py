"""Setup configuration for CiteMe."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="citeme",
    version="0.1.0",
    author="José Luis Saorín Ferrer",
    author_email="jlsaorin@users.noreply.github.com",
    description="Citation generation, highlighting and PDF/DOCX export for eight academic and legal citation styles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/joseluissaorin/citeme",
    packages=find_packages(exclude=["examples", "examples.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Education",
        "Intended Audience :: Legal Industry",
        "Topic :: Text Processing :: Markup",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "python-dotenv>=1.0.0",
        # LLM provider
        "google-generativeai>=0.3.0",
        # Formatting and export
        "beautifulsoup4>=4.11.0",
        "python-docx>=0.8.11",
        "reportlab>=3.6.0",
    ],
    extras_require={
        "dev": [
            # Development dependencies
            "pytest>=7.0.0",
            "pypdf>=3.0.0",
            "black>=22.0.0",
            "mypy>=0.990",
            "flake8>=5.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pypdf>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "citeme=citeme.cli:main",
        ],
    },
)
