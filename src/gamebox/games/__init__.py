"""One module per game; engines never import each other."""
