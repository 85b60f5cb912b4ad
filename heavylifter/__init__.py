"""
Heavy Lifter - describe an app idea, get scaffold files and a build preview.

Conversation-driven requirement gathering over keyword classifiers,
template-based code generation and a simulated build progress display.
"""

__version__ = "0.2.0"
