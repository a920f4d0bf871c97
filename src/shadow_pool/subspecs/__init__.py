"""Subspecifications of the shadow pool core: field, hash, tree, commitments and proofs."""
