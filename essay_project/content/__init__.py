"""Essay documents: front-matter, identity, links and collection loading."""
