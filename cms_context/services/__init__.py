"""Content pipeline services: classification, codec, chunking, assembly, catalog."""
