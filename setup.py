from setuptools import setup, find_packages

setup(
    name="edit-gate",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "textual",
        # Token-based chunking baseline
        "tiktoken>=0.5",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "editgate=edit_gate.cli:main",
        ],
    },
    description="Gated file edits: proposals with diffs, approval, backups and rollback.",
)
