#!/usr/bin/env python3
"""
Command-line interface for the design-to-code pipeline.

Gemini produces the design specification, Claude produces the code.
"""

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from design_to_code.backends.base import UnconfiguredBackend
from design_to_code.backends.claude import resolve_code_backend
from design_to_code.backends.gemini import resolve_design_backend
from design_to_code.config import (
    get_config_path,
    load_config,
    mask_secret,
    save_config,
)
from design_to_code.errors import AuthNotConfiguredError
from design_to_code.io.output_writer import OutputWriter
from design_to_code.pipeline.code import SUPPORTED_FRAMEWORKS, CodeGenerator
from design_to_code.pipeline.design import DesignGenerator

# Load environment variables
load_dotenv()

DESIGN_ACTIONS = ("generate", "analyze", "refine")
CODE_ACTIONS = ("generate", "refactor", "add-feature")
CONFIG_ACTIONS = ("show", "init")


def new_run_id() -> str:
    return f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"


def ask(message, default=None):
    """Prompt for a line of text."""
    suffix = f" [{default}]" if default else ""
    answer = input(f"{message}{suffix}: ").strip()
    return answer or (default or "")


def ask_choice(message, choices, default=None):
    """Prompt until one of the choices (by value or number) is entered."""
    print(message)
    for index, (label, value) in enumerate(choices, 1):
        print(f"  {index}. {label}")
    values = [value for _, value in choices]
    while True:
        answer = ask("Choice", default)
        if answer in values:
            return answer
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return values[int(answer) - 1]
        print(f"Please enter one of: {', '.join(values)}")


def confirm(message, default=False):
    hint = "Y/n" if default else "y/N"
    answer = input(f"{message} ({hint}): ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def print_design_summary(design):
    print("\n📋 Design Summary:")
    print(f"   Name: {design.name}")
    print(f"   Description: {design.description}")
    colors = [color for color in design.color_scheme.as_list() if color]
    if colors:
        print(f"   Colors: {', '.join(colors)}")
    print(f"   Components: {design.count_components()}")


def print_generated(generated, written):
    print("\n📁 Files created:")
    for path in written:
        print(f"   - {path}")
    if generated.instructions:
        print("\n📖 Setup Instructions:")
        print(generated.instructions)


def cmd_design(args, config):
    """Generate, analyze or refine a design specification."""
    if args.action not in DESIGN_ACTIONS:
        print(f"❌ Unknown action: {args.action}. Use: {', '.join(DESIGN_ACTIONS)}")
        return 1

    if args.action == "generate" and not args.input:
        print("❌ Prompt is required for generate action")
        return 1
    if args.action == "analyze" and not args.input:
        print("❌ Image path is required for analyze action")
        return 1
    if args.action == "refine" and (not args.input or not args.design):
        print("❌ Feedback and --design file are required for refine action")
        return 1

    generator = DesignGenerator(config=config, run_id=new_run_id())

    if args.action == "generate":
        print("🎨 Generating design with Gemini...")
        design = generator.generate(args.input)
    elif args.action == "analyze":
        image_path = Path(args.input)
        if not image_path.exists():
            print(f"❌ Error: Image not found: {image_path}")
            return 1
        print(f"🖼️  Analyzing image with Gemini: {image_path}")
        design = generator.analyze_image(image_path)
    else:
        existing = OutputWriter.load_design(args.design)
        print("✏️  Refining design with Gemini...")
        design = generator.refine(existing, args.input)

    output_path = OutputWriter.save_design(design, args.output)
    print(f"✅ Design saved to {output_path}")
    print_design_summary(design)

    return 0


def cmd_code(args, config):
    """Generate, refactor or extend code with Claude."""
    if args.action not in CODE_ACTIONS:
        print(f"❌ Unknown action: {args.action}. Use: {', '.join(CODE_ACTIONS)}")
        return 1

    framework = args.framework or config.framework
    output_dir = Path(args.output or config.output_dir)

    if args.action == "generate" and not args.design:
        print("❌ --design file is required for generate action")
        return 1
    if args.action == "refactor" and (not args.code or not args.instructions):
        print("❌ --code and --instructions are required for refactor action")
        return 1
    if args.action == "add-feature" and (not args.code or not args.feature):
        print("❌ --code and --feature are required for add-feature action")
        return 1

    generator = CodeGenerator(config=config, run_id=new_run_id())

    if args.action == "generate":
        design = OutputWriter.load_design(args.design)
        print(f"🤖 Generating {framework} code with Claude...")
        generated = generator.generate_code(design, framework)
        written = OutputWriter(output_dir).write(generated)
        print(f"✅ Code generated in {output_dir}")
        print_generated(generated, written)

    elif args.action == "refactor":
        source = OutputWriter.read_source(args.code)
        print("🔧 Refactoring code with Claude...")
        refactored = generator.refactor_code(source, args.instructions)
        OutputWriter.write_source(args.code, refactored)
        print(f"✅ Code refactored: {args.code}")

    else:
        source = OutputWriter.read_source(args.code)
        print("➕ Adding feature with Claude...")
        generated = generator.add_feature(source, args.feature, framework)
        written = OutputWriter(output_dir).write(generated)
        print(f"✅ Feature added, files saved to {output_dir}")
        print_generated(generated, written)

    return 0


def cmd_generate(args, config):
    """Interactive design-to-code generation."""
    print("\n🎨 Design-to-Code Interactive Generator\n")

    output_dir = Path(args.output or config.output_dir)
    run_id = new_run_id()
    designer = DesignGenerator(config=config, run_id=run_id)

    input_type = ask_choice(
        "How would you like to create your design?",
        [("📝 Describe it (text prompt)", "text"), ("🖼️  Upload an image", "image")],
        default="text",
    )

    if input_type == "text":
        prompt = ""
        while not prompt:
            prompt = ask("Describe what you want to create")
        print("🎨 Generating design with Gemini...")
        design = designer.generate(prompt)
    else:
        image_path = Path(ask("Enter the path to your design image"))
        while not image_path.exists():
            print("File not found")
            image_path = Path(ask("Enter the path to your design image"))
        print("🖼️  Analyzing design image with Gemini...")
        design = designer.analyze_image(image_path)

    print_design_summary(design)

    if confirm("Would you like to refine the design?", default=False):
        feedback = ask("What changes would you like?")
        print("✏️  Refining design...")
        design = designer.refine(design, feedback)

    design_path = OutputWriter.save_design(design, output_dir / "design-spec.json")
    print(f"\n✅ Design saved to {design_path}")

    if confirm("Generate code from this design?", default=True):
        framework = ask_choice(
            "Select framework:",
            [("Next.js (App Router)", "nextjs"), ("React", "react"), ("Vue 3", "vue")],
            default=args.framework or config.framework,
        )
        print("🤖 Generating code with Claude...")
        generated = CodeGenerator(config=config, run_id=run_id).generate_code(design, framework)
        written = OutputWriter(output_dir).write(generated)
        print_generated(generated, written)

    print("\n🎉 Done! Your project is ready.\n")
    return 0


def cmd_workflow(args, config):
    """Run the full workflow: design with Gemini, then code with Claude."""
    print("\n🚀 Starting design-to-code workflow...\n")

    framework = args.framework or config.framework
    output_dir = Path(args.output or config.output_dir)
    run_id = new_run_id()

    designer = DesignGenerator(config=config, run_id=run_id)
    coder = CodeGenerator(config=config, run_id=run_id)

    # A missing credential for either service fails before any call
    for generator in (designer, coder):
        backend = generator.backend.backend
        if isinstance(backend, UnconfiguredBackend):
            raise AuthNotConfiguredError(backend.setup_message)

    print("Step 1: Generating design with Gemini...")
    design = designer.generate(args.prompt)
    print("✅ Design generated\n")

    print(f"Step 2: Generating {framework} code with Claude...")
    generated = coder.generate_code(design, framework)
    print("✅ Code generated\n")

    print("Step 3: Saving files...")
    OutputWriter.save_design(design, output_dir / "design-spec.json")
    written = OutputWriter(output_dir).write(generated)
    print(f"✅ Files saved to {output_dir}")
    print_generated(generated, written)

    print("\n🎉 Workflow complete!")
    return 0


def cmd_config(args, config):
    """Show or edit the user configuration."""
    config_path = get_config_path()

    if args.gemini:
        config.gemini_api_key = args.gemini
        save_config(config, config_path)
        print("✅ Gemini API key saved")
        return 0
    if args.anthropic:
        config.anthropic_api_key = args.anthropic
        save_config(config, config_path)
        print("✅ Anthropic API key saved")
        return 0
    if args.framework:
        config.default_framework = args.framework
        save_config(config, config_path)
        print(f"✅ Default framework set to {args.framework}")
        return 0
    if args.output:
        config.default_output_dir = args.output
        save_config(config, config_path)
        print(f"✅ Default output directory set to {args.output}")
        return 0

    action = args.action or "init"
    if action not in CONFIG_ACTIONS:
        print(f"❌ Unknown action: {action}. Use: {', '.join(CONFIG_ACTIONS)}")
        return 1

    if action == "show":
        print("\n⚙️  Current Configuration:\n")
        print(f"   Config file: {config_path}")
        print(f"   Gemini API Key: {mask_secret(config.gemini_api_key)}")
        print(f"   Anthropic API Key: {mask_secret(config.anthropic_api_key)}")
        print(f"   Default Framework: {config.framework}")
        print(f"   Default Output: {config.output_dir}")

        print("\n   Environment Variables:")
        for name in ("GEMINI_API_KEY", "ANTHROPIC_API_KEY"):
            print(f"   {name}: {'Set' if os.getenv(name) else 'Not set'}")

        print("\n   Authentication Status:")
        gemini_auth = resolve_design_backend(config).check_auth()
        print(f"   Gemini: {gemini_auth.method} - {gemini_auth.status}")
        claude_auth = resolve_code_backend(config).check_auth()
        print(f"   Claude: {claude_auth.method} - {claude_auth.status}")
        print()
        return 0

    print("\n⚙️  Design-to-Code Configuration\n")
    gemini_key = ask("Gemini API Key (from Google AI Studio)", mask_secret(config.gemini_api_key)
                     if config.gemini_api_key else None)
    anthropic_key = ask("Anthropic API Key", mask_secret(config.anthropic_api_key)
                        if config.anthropic_api_key else None)
    framework = ask_choice(
        "Default framework:",
        [(name, name) for name in SUPPORTED_FRAMEWORKS],
        default=config.framework,
    )
    output_dir = ask("Default output directory", config.output_dir)

    # Keep stored keys when the masked default is accepted
    if gemini_key and not gemini_key.startswith("***"):
        config.gemini_api_key = gemini_key
    if anthropic_key and not anthropic_key.startswith("***"):
        config.anthropic_api_key = anthropic_key
    config.default_framework = framework
    config.default_output_dir = output_dir

    save_config(config, config_path)
    print("\n✅ Configuration saved!\n")
    print("💡 Tip: You can also use a .env file in your project:")
    print("   GEMINI_API_KEY=your_key_here")
    print("   ANTHROPIC_API_KEY=your_key_here\n")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="design-to-code",
        description="Design with Gemini, code with Claude",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Design command
    design_parser = subparsers.add_parser("design", help="Generate or analyze designs using Gemini")
    design_parser.add_argument("action", help="Action: generate, analyze, refine")
    design_parser.add_argument("input", nargs="?", help="Prompt text, image path, or refine feedback")
    design_parser.add_argument("--output", "-o", default="./design-spec.json", help="Output file path")
    design_parser.add_argument("--design", "-d", help="Existing design file (for refine)")

    # Code command
    code_parser = subparsers.add_parser("code", help="Generate or modify code using Claude")
    code_parser.add_argument("action", help="Action: generate, refactor, add-feature")
    code_parser.add_argument("--design", "-d", help="Design spec file (for generate)")
    code_parser.add_argument("--code", "-c", help="Code file (for refactor/add-feature)")
    code_parser.add_argument("--instructions", "-i", help="Instructions for refactor")
    code_parser.add_argument("--feature", "-f", help="Feature to add")
    code_parser.add_argument("--output", "-o", help="Output directory")
    code_parser.add_argument("--framework", help="Framework: nextjs, react, vue")

    # Interactive command
    gen_parser = subparsers.add_parser("generate", help="Interactive design-to-code generation")
    gen_parser.add_argument("--output", "-o", help="Output directory")
    gen_parser.add_argument("--framework", help="Framework: nextjs, react, vue")

    # Workflow command
    workflow_parser = subparsers.add_parser("workflow", help="Run full workflow: design, then code")
    workflow_parser.add_argument("prompt", help="Description of what you want to create")
    workflow_parser.add_argument("--output", "-o", help="Output directory")
    workflow_parser.add_argument("--framework", "-f", help="Framework to use")

    # Config command
    config_parser = subparsers.add_parser("config", help="Configure API keys and settings")
    config_parser.add_argument("action", nargs="?", help="Action: show, init")
    config_parser.add_argument("--gemini", help="Set Gemini API key")
    config_parser.add_argument("--anthropic", help="Set Anthropic API key")
    config_parser.add_argument("--framework", help="Set default framework")
    config_parser.add_argument("--output", help="Set default output directory")

    return parser


COMMANDS = {
    "design": cmd_design,
    "code": cmd_code,
    "generate": cmd_generate,
    "workflow": cmd_workflow,
    "config": cmd_config,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; keep exit statuses to 0 and 1
        return 0 if e.code in (0, None) else 1

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config()
        return COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 1
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
