#!/usr/bin/env python3
"""
TERRAFORMAT FORMAT PIPELINE - The Rewriter
------------------------------------------
Central coordinator for formatting one document. Runs in a strict order:

1. Parse the bytes into a File (token-preserving tree).
2. Rewrite bodies bottom-up: child blocks first, so the tokens a parent
   sees for each child already reflect the child's canonical form.
3. For each body: decompose, sort (when the config asks for it), render
   the token stream, then replace the body's contents with it.
4. Serialise and guarantee the trailing newline.

The whole pass is a pure bytes-to-bytes transformation. Any error aborts
the document; nothing partially formatted is ever returned.
"""

import logging
from typing import List, Optional

from terraformat.core.config import FormatConfig
from terraformat.core.errors import ParseConfigError
from terraformat.core.models import ROOT_CONTEXT, BodyDecomposition, Context
from terraformat.formatting.decomposer import decompose
from terraformat.formatting.ordering import should_sort, sort_items
from terraformat.formatting.spacing import (
    contains_comment, normalize_leading, normalize_prefix, should_insert_blank_line,
)
from terraformat.hcl.parser import parse_config
from terraformat.hcl.tokens import (
    START_POS, Token, detect_newline, is_line_terminated, newline_token,
)
from terraformat.hcl.tree import Body

logger = logging.getLogger("terraformat.pipeline")


def ensure_trailing_newline(src: bytes, eol: bytes = b"\n") -> bytes:
    if not src or src.endswith(b"\n"):
        return src
    return src + eol


class FormatPipeline:
    """
    Applies one FormatConfig to documents. Holds no per-document state,
    so a single instance may format any number of documents.
    """

    def __init__(self, cfg: Optional[FormatConfig] = None):
        self.cfg = cfg or FormatConfig.default()

    def run(self, src: bytes, filename: str = "") -> bytes:
        file, diagnostics = parse_config(src, filename, START_POS)
        if diagnostics:
            logger.debug("parse failed for %s: %d diagnostics", filename or "<stdin>", len(diagnostics))
            raise ParseConfigError(diagnostics)

        # Synthesized line breaks follow the document's own line ending.
        eol = detect_newline(file.build_tokens())
        self.rewrite(file.body, ROOT_CONTEXT, eol)

        out = file.bytes()
        if self.cfg.ensure_eof_newline:
            out = ensure_trailing_newline(out, eol)
        return out

    def rewrite(self, body: Body, ctx: Context, eol: bytes = b"\n"):
        for block in body.blocks():
            self.rewrite(block.body, Context(root=False, block_type=block.type), eol)

        decomposition = decompose(body)
        if decomposition.is_empty():
            return

        if should_sort(ctx, self.cfg):
            sort_items(decomposition.items, ctx, self.cfg)

        # Render everything before touching the body: the items' token
        # lists are slices of the body's current contents.
        tokens = self.render(decomposition, ctx, eol)
        body.clear()
        body.append_unstructured_tokens(tokens)

    def render(self, decomposition: BodyDecomposition, ctx: Context,
               eol: bytes = b"\n") -> List[Token]:
        out = normalize_leading(decomposition.leading, eol)
        items = decomposition.items

        for index, item in enumerate(items):
            if index > 0 and not is_line_terminated(items[index - 1].tokens):
                # Only the source's final item may lack a newline; once it
                # has been moved up it needs one.
                out.append(newline_token(eol))

            insert_blank = should_insert_blank_line(items, index, ctx, self.cfg)
            if insert_blank:
                out.append(newline_token(eol))

            if insert_blank and not contains_comment(item.prefix):
                prefix = []
            else:
                prefix = normalize_prefix(item.prefix)

            out.extend(prefix)
            out.extend(item.tokens)

        out.extend(decomposition.trailing)
        return out


def format_source(src: bytes, cfg: Optional[FormatConfig] = None, filename: str = "") -> bytes:
    """Formats one Terraform/HCL document."""
    return FormatPipeline(cfg).run(src, filename)
