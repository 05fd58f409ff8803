from setuptools import setup, find_packages

setup(
    name="issue-bot",
    version="1.0.0",
    description="GitHub webhook plugins: scheduled release issues and stale issue auto-closing",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "rich>=13.0.0",
        "click>=8.1.0",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "issue-bot=issue_bot.cli:main",
        ],
    },
)
