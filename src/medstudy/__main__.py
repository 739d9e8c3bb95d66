"""
Entry point for running MedStudy as a module.

Usage:
    python -m src.medstudy log --discipline Anatomy --topic Bones
    python -m src.medstudy disciplines
    python -m src.medstudy --help
"""
from .cli import main

if __name__ == "__main__":
    main()
