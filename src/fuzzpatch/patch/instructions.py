EDIT_SCRIPT_INSTRUCTION = r"""# Edit format: file headers with SEARCH/REPLACE blocks

**OUTPUT:** Only file headers and edit blocks. Keep prose outside of them short.

## Format
Start every file with a header line, then one block per change:

### File: <relative/path/to/file>
<<<<<<< SEARCH
<contiguous lines copied from the current file>
=======
<replacement lines>
>>>>>>> REPLACE

## Rules
1. Copy SEARCH lines from the current file. Indentation and blank lines may drift, but every non-whitespace character must match.
2. Include enough lines in SEARCH to identify the region; only the first matching region is replaced.
3. Emit several small blocks instead of one large block. Blocks for one file are applied top to bottom, each against the result of the previous one.
4. Blocks must not overlap. Each block has its own SEARCH/REPLACE fences.
5. You may repeat a `### File:` header; blocks under repeated headers are appended to the same file.
6. Do not put line numbers, diff markers or other decorations inside blocks.

## Self-check before emitting
1. Every change has a header and a complete block (SEARCH, =======, REPLACE)?
2. SEARCH text copied from the file, not paraphrased?
3. Changes as small as possible?
"""


def get_instruction() -> str:
    return EDIT_SCRIPT_INSTRUCTION
