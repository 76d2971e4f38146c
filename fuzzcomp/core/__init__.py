# Core completion engine for fuzzcomp
