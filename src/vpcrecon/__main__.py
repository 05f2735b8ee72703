import vpcrecon.cli

vpcrecon.cli.main()
