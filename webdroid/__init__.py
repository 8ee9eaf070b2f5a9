"""
webdroid: wrap an HTML/JS web application into an Android project skeleton.

Source code is ingested, analyzed by an LLM for the device permissions it
implies, given a generated launcher icon, and assembled into a zip archive
holding a buildable WebView-based Android project with a CI workflow.
"""

__version__ = "1.0.0"
__author__ = "webdroid Team"
