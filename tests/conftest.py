import pytest

from llmsedit import find_duplicates, parse


def count_words(text):
    return len(text.split())


DUP_TEXT = "# A\ntext1\n## B\ntext2\n## B\ntext3\n## B\ntext4\n"

GUIDE_TEXT = """Intro line before any heading.

# Guide

Welcome.

## Install

pip install thing

### Linux

apt get

### macOS

brew

## Usage

Run it.

# API

## Client

### Examples

one

## Server

### Examples

two

## Tools

### Examples

three
"""


@pytest.fixture
def tokenizer():
    """Deterministic whitespace tokenizer, one token per word."""
    return count_words


@pytest.fixture
def dup_doc(tokenizer):
    return parse(DUP_TEXT, tokenizer)


@pytest.fixture
def guide_doc(tokenizer):
    return parse(GUIDE_TEXT, tokenizer)


@pytest.fixture
def guide_groups(guide_doc):
    return find_duplicates(guide_doc.sections)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def dup_text():
    return DUP_TEXT


@pytest.fixture
def guide_text():
    return GUIDE_TEXT
