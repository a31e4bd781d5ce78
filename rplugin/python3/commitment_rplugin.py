"""Remote plugin manifest entry: Neovim imports this file on :UpdateRemotePlugins."""

from commitment.nvim import CommitmentPlugin  # noqa: F401
