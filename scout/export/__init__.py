"""Report exporters."""

# from scout.export.markdown import format_as_markdown

__all__ = ["format_as_markdown"]
