# Completion session engine
