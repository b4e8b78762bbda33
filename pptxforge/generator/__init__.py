"""Part generators: pure functions that render OOXML parts as strings or bytes."""
