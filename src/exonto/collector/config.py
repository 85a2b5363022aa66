"""
Configuration for the SourceCollector module.
Defines inclusion/exclusion rules and system limits for file ingestion.
"""

# Hard limit for single file size (1MB).
# Generated sources beyond this size are not worth walking.
MAX_FILE_SIZE_BYTES = 1024 * 1024

# Supported Extensions (Allow-list).
# Parsers may narrow or replace this (see SourceParser.extensions).
SUPPORTED_EXTENSIONS = {'.ex', '.exs'}

# Directories to ALWAYS ignore (Safety Net beyond .gitignore).
# Dependencies and build artifacts are analyzed separately, if at all.
BLOCKLIST_DIRS = {
    '.git', '.svn', '.hg', '.idea', '.vscode', '.elixir_ls',
    'deps', '_build', 'node_modules', 'cover', 'doc',
    'priv', 'tmp', '.fetch'
}

# Path segments that mark test code.
TEST_DIRS = {'test', 'tests'}
