"""BreadHub ProofMaster backend"""
