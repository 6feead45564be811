"""Settings package for the site configuration service.

Provides the service's own settings, layered with precedence:
defaults → JSON settings file → environment → CLI.

Main components:
- config.py: Settings dataclasses and loader
- service.py: Facade for simplified settings access
"""
