"""salespay — seller compensation from base salary plus sales commission."""
