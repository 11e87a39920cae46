from cosmos_deploy.cli.app import app

app(prog_name="cosmos-deploy")
