"""Test suite for the inference server.

Unit tests live under unit/, grouped by domain, with shared fakes for the
tokenizer, model and embedder capabilities in the helpers/ subpackage.
"""
