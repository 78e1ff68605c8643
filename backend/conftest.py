import os

# The Mermaid CLI grammar check is opt-in for the test run
os.environ.setdefault("DIAGRAM_GRAMMAR_CHECK", "false")
