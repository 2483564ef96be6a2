"""
Utility functions module.

Fixed-point helpers shared by the snapshot models and the sync engine.

Amount Semantics:
- On-chain amounts are integers in base units and are summed as integers
- Conversion to whole units happens once, exactly, via Decimal exponents
- Floats never touch a balance
"""
