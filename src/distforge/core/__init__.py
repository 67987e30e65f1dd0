"""distforge core: asset discovery, task tree assembly, invocation and verify."""
