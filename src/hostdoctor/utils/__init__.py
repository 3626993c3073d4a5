"""Small parsing helpers shared by probes and the evaluator."""
