# Engine-facing boundary
#
# Wires the codec to an inference engine.
#
# Key components:
#   - adapters/     Engine-specific adapters (Transformers)
#   - registry.py   Maps adapter names to adapter classes
#   - types.py      Completion result type
#   - boundary.py   Decode -> complete -> encode, never raises
