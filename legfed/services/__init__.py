"""Outside collaborators used while converting (NCBI PubMed)."""
